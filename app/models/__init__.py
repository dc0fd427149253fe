from .base import Base
from .field_group import FieldGroup
from .custom_field import CustomField
from .field_value import FieldValue
from .form_submission import FormSubmission
from .activity_log import ActivityLog
from .mixins import EntityRef, HasCustomFields
from .entity_registry import entity_registry, register_entity
from .category import Category
from .brand import Brand
from .school import School

__all__ = [
    'Base', 'FieldGroup', 'CustomField', 'FieldValue', 'FormSubmission', 'ActivityLog',
    'EntityRef', 'HasCustomFields', 'entity_registry', 'register_entity',
    'Category', 'Brand', 'School'
]
