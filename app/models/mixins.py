"""
Entity capability for custom field storage.

A model opts into custom fields by inheriting ``HasCustomFields``. The
value store only ever sees the ``EntityRef`` built from the instance, so
any mapped class with an ``id`` column can participate.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import object_session


@dataclass(frozen=True)
class EntityRef:
    entity_type: str
    entity_id: str

    @classmethod
    def of(cls, entity_type: str, entity_id) -> "EntityRef":
        return cls(entity_type, str(entity_id))


class HasCustomFields:
    """Mixin for models whose instances carry custom field values."""

    @classmethod
    def custom_fields_entity_type(cls) -> str:
        return cls.__name__

    @property
    def custom_fields_ref(self) -> EntityRef:
        return EntityRef.of(self.custom_fields_entity_type(), self.id)

    def _custom_fields_session(self):
        db = object_session(self)
        if db is None:
            raise RuntimeError(f"{type(self).__name__} #{self.id} is not attached to a session")
        return db

    def get_custom_field(self, field_key: str) -> Optional[List[Any]]:
        from app.services.field_value_service import FieldValueService
        return FieldValueService.get_value(self._custom_fields_session(), self.custom_fields_ref, field_key)

    def get_all_custom_fields(self) -> Dict[str, List[Any]]:
        from app.services.field_value_service import FieldValueService
        return FieldValueService.get_values(self._custom_fields_session(), self.custom_fields_ref)

    def set_custom_field(self, field_key: str, value: Any) -> None:
        from app.services.field_value_service import FieldValueService
        FieldValueService.set_value(self._custom_fields_session(), self.custom_fields_ref, field_key, value)

    def set_custom_fields(self, values: Dict[str, Any]) -> List[str]:
        """Save several keys at once; unknown keys are skipped and returned."""
        from app.services.field_value_service import FieldValueService
        return FieldValueService.set_values(self._custom_fields_session(), self.custom_fields_ref, values)

    def delete_custom_fields(self) -> int:
        from app.services.field_value_service import FieldValueService
        return FieldValueService.delete_values(self._custom_fields_session(), self.custom_fields_ref)
