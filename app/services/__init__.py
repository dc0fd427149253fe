from .field_definition_service import FieldDefinitionService
from .field_value_service import FieldValueService
from .field_type_service import FieldTypeService
from .entity_resolver_service import EntityResolverService
from .entity_fields_service import EntityFieldsService
from .form_submission_service import FormSubmissionService
from .activity_service import ActivityService

__all__ = [
    "FieldDefinitionService", "FieldValueService", "FieldTypeService", "EntityResolverService",
    "EntityFieldsService", "FormSubmissionService", "ActivityService"
]
