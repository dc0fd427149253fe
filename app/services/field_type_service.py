"""
Per-type display formatting and submission validation for custom fields.

Everything here is a pure function of a field definition and a value
list; the only outside dependency is the optional ``resolver`` used by
``model`` fields, which must raise ResolutionFailedError when it cannot
find the referenced entity.
"""
from datetime import date, datetime
from html import escape
from typing import Any, Callable, Dict, Iterable, List, Optional
import logging

from app.core.exceptions import ResolutionFailedError, ValidationFailedError
from app.schemas.custom_fields import CHOICE_TYPES, FieldType
from app.services.field_value_service import FieldValueService

logger = logging.getLogger(__name__)

Resolver = Callable[[str, Any], Dict[str, Any]]


class FieldTypeService:

    @staticmethod
    def format_value(field, value: Any, resolver: Optional[Resolver] = None) -> str:
        if FieldTypeService.is_blank(value):
            return ""

        if field is None:
            return FieldTypeService._join(value)

        values = FieldValueService.normalize_value(value)
        first = values[0] if values else None
        field_type = field.type

        if field_type in CHOICE_TYPES:
            if field.choices:
                return ", ".join(
                    FieldTypeService._stringify(FieldTypeService._choice_label(field.choices, v))
                    for v in values
                )

        elif field_type == FieldType.TRUE_FALSE.value:
            return "Yes" if (first is True or first == "true") else "No"

        elif field_type == FieldType.DATE.value:
            parsed = FieldTypeService._parse_datetime(first)
            if parsed:
                return parsed.strftime("%b %d, %Y")

        elif field_type == FieldType.DATETIME.value:
            parsed = FieldTypeService._parse_datetime(first)
            if parsed:
                return FieldTypeService._format_datetime(parsed)

        elif field_type == FieldType.URL.value:
            if first:
                url = escape(str(first))
                return f'<a href="{url}" target="_blank">{url}</a>'

        elif field_type == FieldType.EMAIL.value:
            if first:
                email = escape(str(first))
                return f'<a href="mailto:{email}">{email}</a>'

        elif field_type == FieldType.MODEL.value:
            if first not in (None, ""):
                return FieldTypeService._format_model(field, first, resolver)

        return FieldTypeService._join(value)

    @staticmethod
    def validate_submission(fields: Iterable, data: Optional[Dict[str, Any]]) -> Dict[str, List[Any]]:
        """
        Presence-check required fields and return the group's answers as lists.

        Keys that are not fields of the group are dropped. Type-specific
        correctness (email syntax and the like) is left to the caller.
        """
        data = data if isinstance(data, dict) else {}
        errors = {}
        normalized = {}

        for field in fields:
            raw = data.get(field.key)
            if field.required and FieldTypeService.is_blank(raw):
                errors[field.key] = f"The {field.label} field is required."
                continue
            if field.key in data:
                normalized[field.key] = FieldValueService.normalize_value(raw)

        if errors:
            raise ValidationFailedError(errors)
        return normalized

    @staticmethod
    def is_blank(value: Any) -> bool:
        if value is None:
            return True
        if isinstance(value, str):
            return value.strip() == ""
        if isinstance(value, (list, tuple, dict)):
            return len(value) == 0
        return False

    @staticmethod
    def _format_model(field, entity_id: Any, resolver: Optional[Resolver]) -> str:
        if resolver and field.model_type:
            try:
                return resolver(field.model_type, entity_id)["name"]
            except ResolutionFailedError as e:
                logger.warning("Field %s: %s", field.key, e.message)

        if field.model_type:
            return f"{entity_id} ({field.model_type})"
        return str(entity_id)

    @staticmethod
    def _choice_label(choices: Dict[str, Any], value: Any) -> Any:
        lookup = value if isinstance(value, str) else FieldTypeService._stringify(value)
        return choices.get(lookup, value)

    @staticmethod
    def _parse_datetime(value: Any) -> Optional[datetime]:
        if not value:
            return None
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        try:
            return datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError:
            return None

    @staticmethod
    def _format_datetime(value: datetime) -> str:
        hour = value.hour % 12 or 12
        meridiem = "AM" if value.hour < 12 else "PM"
        return f"{value.strftime('%b %d, %Y')} {hour}:{value.strftime('%M')} {meridiem}"

    @staticmethod
    def _join(value: Any) -> str:
        if isinstance(value, (list, tuple)):
            return ", ".join(FieldTypeService._stringify(v) for v in value)
        return FieldTypeService._stringify(value)

    @staticmethod
    def _stringify(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)
