from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional

from app.core.exceptions import UnsupportedCapabilityError
from app.models.entity_registry import entity_registry
from app.services.entity_resolver_service import EntityResolverService
from app.services.field_definition_service import FieldDefinitionService
from app.services.field_type_service import FieldTypeService
from app.services.field_value_service import FieldValueService


class EntityFieldsService:
    """Custom field schema and values for a live, addressable entity."""

    @staticmethod
    def _require_capable_model(model_name: str):
        model = entity_registry.get_model(model_name)
        if not entity_registry.supports_custom_fields(model_name):
            raise UnsupportedCapabilityError(f"Model '{model_name}' does not support custom fields")
        return model

    @staticmethod
    def get_entity_fields(db: Session, model_name: str, entity_id: Optional[Any] = None) -> Dict[str, Any]:
        """Active groups plus the entity's stored values (empty when the entity is absent)."""
        EntityFieldsService._require_capable_model(model_name)
        groups = FieldDefinitionService.list_groups(db, active_only=True)

        values = {}
        if entity_id is not None:
            entity = EntityResolverService.find_entity(db, model_name, entity_id)
            if entity is not None:
                values = FieldValueService.get_values(db, FieldValueService.ref_for(entity))

        return {
            "field_groups": [FieldDefinitionService.serialize_group(g) for g in groups],
            "values": values,
        }

    @staticmethod
    def save_entity_values(db: Session, model_name: str, entity_id: Any, values: Dict[str, Any]) -> List[str]:
        EntityFieldsService._require_capable_model(model_name)
        entity = EntityResolverService.require_entity(db, model_name, entity_id)
        return FieldValueService.set_values(db, FieldValueService.ref_for(entity), values)

    @staticmethod
    def get_formatted_value(db: Session, entity: Any, field_key: str) -> str:
        ref = FieldValueService.ref_for(entity)
        value = FieldValueService.get_value(db, ref, field_key)
        field = FieldDefinitionService.get_field(db, field_key)

        def resolver(model_type, model_id):
            return EntityResolverService.resolve(db, model_type, model_id)

        return FieldTypeService.format_value(field, value, resolver)

    @staticmethod
    def clone_entity_values(db: Session, source: Any, target: Any) -> int:
        return FieldValueService.clone_values(
            db, FieldValueService.ref_for(source), FieldValueService.ref_for(target)
        )

