from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import IntegrityError
from sqlalchemy import func
from typing import List, Dict, Any, Optional
import logging

from app.core.exceptions import NotFoundError, ConflictError
from app.models.field_group import FieldGroup
from app.models.custom_field import CustomField
from app.models.form_submission import FormSubmission
from app.schemas.custom_fields import FieldType

logger = logging.getLogger(__name__)

GROUP_ATTRIBUTES = ("title", "key", "description", "location", "position", "active")
FIELD_ATTRIBUTES = (
    "label", "name", "key", "type", "instructions", "required", "default_value", "placeholder",
    "choices", "multiple", "model_type", "conditional_logic", "wrapper", "order",
)
# columns that cannot be cleared by an explicit null in an update
REQUIRED_ATTRIBUTES = {"title", "key", "position", "active", "label", "name", "type", "required", "multiple", "order"}


class FieldDefinitionService:
    """Field groups and their fields: lookup, admin writes and ordering."""

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    @staticmethod
    def list_groups(db: Session, active_only: bool = True) -> List[FieldGroup]:
        query = db.query(FieldGroup).options(selectinload(FieldGroup.fields))
        if active_only:
            query = query.filter(FieldGroup.active.is_(True))
        return query.order_by(FieldGroup.position, FieldGroup.id).all()

    @staticmethod
    def get_group(db: Session, key: str) -> Optional[FieldGroup]:
        return db.query(FieldGroup).options(selectinload(FieldGroup.fields))\
            .filter(FieldGroup.key == key).first()

    @staticmethod
    def get_group_by_id(db: Session, group_id: int) -> Optional[FieldGroup]:
        return db.query(FieldGroup).options(selectinload(FieldGroup.fields))\
            .filter(FieldGroup.id == group_id).first()

    @staticmethod
    def require_group(db: Session, key: str, active_only: bool = False) -> FieldGroup:
        group = FieldDefinitionService.get_group(db, key)
        if not group or (active_only and not group.active):
            raise NotFoundError(f"Field group '{key}' not found")
        return group

    @staticmethod
    def require_group_by_id(db: Session, group_id: int) -> FieldGroup:
        group = FieldDefinitionService.get_group_by_id(db, group_id)
        if not group:
            raise NotFoundError(f"Field group #{group_id} not found")
        return group

    @staticmethod
    def get_field(db: Session, key: str) -> Optional[CustomField]:
        return db.query(CustomField).filter(CustomField.key == key).first()

    @staticmethod
    def get_field_by_id(db: Session, field_id: int) -> Optional[CustomField]:
        return db.query(CustomField).filter(CustomField.id == field_id).first()

    @staticmethod
    def require_field_by_id(db: Session, field_id: int) -> CustomField:
        field = FieldDefinitionService.get_field_by_id(db, field_id)
        if not field:
            raise NotFoundError(f"Custom field #{field_id} not found")
        return field

    @staticmethod
    def group_exists(db: Session, key: str) -> bool:
        return db.query(FieldGroup.id).filter(FieldGroup.key == key).first() is not None

    @staticmethod
    def field_exists(db: Session, key: str) -> bool:
        return db.query(CustomField.id).filter(CustomField.key == key).first() is not None

    @staticmethod
    def submission_counts(db: Session) -> Dict[int, int]:
        rows = db.query(FormSubmission.field_group_id, func.count(FormSubmission.id))\
            .group_by(FormSubmission.field_group_id).all()
        return {group_id: count for group_id, count in rows}

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------
    @staticmethod
    def create_group(db: Session, data: Dict[str, Any]) -> FieldGroup:
        FieldDefinitionService._ensure_group_key_free(db, data["key"])

        group = FieldGroup(
            title=data["title"],
            key=data["key"],
            description=data.get("description"),
            location=data.get("location"),
            position=data.get("position") or 0,
            active=data.get("active", True),
        )
        db.add(group)
        FieldDefinitionService._commit(db, f"Field group key '{data['key']}' is already taken")
        db.refresh(group)

        logger.info("Created field group %s (%s)", group.id, group.key)
        return group

    @staticmethod
    def update_group(db: Session, group_id: int, data: Dict[str, Any]) -> FieldGroup:
        group = FieldDefinitionService.require_group_by_id(db, group_id)

        if "key" in data and data["key"] != group.key:
            FieldDefinitionService._ensure_group_key_free(db, data["key"], exclude_id=group.id)

        for attr in GROUP_ATTRIBUTES:
            if attr in data and not (data[attr] is None and attr in REQUIRED_ATTRIBUTES):
                setattr(group, attr, data[attr])

        FieldDefinitionService._commit(db, f"Field group key '{data.get('key')}' is already taken")
        db.refresh(group)
        return group

    @staticmethod
    def delete_group(db: Session, group_id: int) -> str:
        """Hard delete; fields, their values and the group's submissions go with it."""
        group = FieldDefinitionService.require_group_by_id(db, group_id)
        key = group.key
        db.delete(group)
        db.commit()

        logger.info("Deleted field group %s (%s)", group_id, key)
        return key

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------
    @staticmethod
    def create_field(db: Session, group_id: int, data: Dict[str, Any]) -> CustomField:
        group = FieldDefinitionService.require_group_by_id(db, group_id)
        FieldDefinitionService._ensure_field_key_free(db, data["key"])

        order = data.get("order")
        if order is None:
            current_max = db.query(func.max(CustomField.order))\
                .filter(CustomField.field_group_id == group.id).scalar()
            order = 0 if current_max is None else current_max + 1

        field = CustomField(field_group_id=group.id)
        for attr in FIELD_ATTRIBUTES:
            if attr in data:
                setattr(field, attr, data[attr])
        field.type = FieldType(data["type"]).value
        field.name = data.get("name") or data["key"]
        field.order = order
        field.required = bool(data.get("required", False))
        field.multiple = bool(data.get("multiple", False))
        db.add(field)

        FieldDefinitionService._commit(db, f"Field key '{data['key']}' is already taken")
        db.refresh(field)

        logger.info("Created field %s (%s) in group %s", field.id, field.key, group.id)
        return field

    @staticmethod
    def update_field(db: Session, field_id: int, data: Dict[str, Any]) -> CustomField:
        field = FieldDefinitionService.require_field_by_id(db, field_id)

        if "key" in data and data["key"] != field.key:
            FieldDefinitionService._ensure_field_key_free(db, data["key"], exclude_id=field.id)

        for attr in FIELD_ATTRIBUTES:
            if attr in data and not (data[attr] is None and attr in REQUIRED_ATTRIBUTES):
                setattr(field, attr, data[attr])
        if data.get("type") is not None:
            field.type = FieldType(data["type"]).value

        FieldDefinitionService._commit(db, f"Field key '{data.get('key')}' is already taken")
        db.refresh(field)
        return field

    @staticmethod
    def delete_field(db: Session, field_id: int) -> str:
        """
        Hard delete. Per-entity values of the field are removed with it;
        submission snapshots that mention its key are left untouched.
        """
        field = FieldDefinitionService.require_field_by_id(db, field_id)
        key = field.key
        db.delete(field)
        db.commit()

        logger.info("Deleted field %s (%s)", field_id, key)
        return key

    @staticmethod
    def reorder_fields(db: Session, group_id: int, ordered_field_ids: List[int]) -> List[CustomField]:
        """
        Rewrite ``order`` as the 0-based index of each id in ``ordered_field_ids``.

        Ids that do not belong to the group are ignored. Each row is updated
        on its own; re-running the call repairs an interrupted reorder.
        """
        group = FieldDefinitionService.require_group_by_id(db, group_id)

        for order, field_id in enumerate(ordered_field_ids):
            db.query(CustomField).filter(
                CustomField.field_group_id == group.id,
                CustomField.id == field_id,
            ).update({CustomField.order: order}, synchronize_session=False)

        db.commit()
        db.expire(group)
        return FieldDefinitionService.require_group_by_id(db, group_id).fields

    @staticmethod
    def set_field_orders(db: Session, group_id: int, orders: List[Dict[str, int]]) -> List[CustomField]:
        """Assign explicit ``order`` values from ``[{"id": .., "order": ..}]``."""
        group = FieldDefinitionService.require_group_by_id(db, group_id)

        ids = [item["id"] for item in orders]
        known = {
            row[0] for row in db.query(CustomField.id).filter(
                CustomField.field_group_id == group.id,
                CustomField.id.in_(ids),
            ).all()
        }
        missing = [field_id for field_id in ids if field_id not in known]
        if missing:
            raise NotFoundError(f"Custom fields not found: {', '.join(str(i) for i in missing)}")

        for item in orders:
            db.query(CustomField).filter(
                CustomField.field_group_id == group.id,
                CustomField.id == item["id"],
            ).update({CustomField.order: item["order"]}, synchronize_session=False)

        db.commit()
        db.expire(group)
        return FieldDefinitionService.require_group_by_id(db, group_id).fields

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    @staticmethod
    def serialize_field(field: CustomField) -> Dict[str, Any]:
        return {
            "id": field.id,
            "field_group_id": field.field_group_id,
            "label": field.label,
            "name": field.name,
            "key": field.key,
            "type": field.type,
            "instructions": field.instructions,
            "required": field.required,
            "default_value": field.default_value,
            "placeholder": field.placeholder,
            "choices": field.choices,
            "multiple": field.multiple,
            "model_type": field.model_type,
            "conditional_logic": field.conditional_logic,
            "wrapper": field.wrapper,
            "order": field.order,
        }

    @staticmethod
    def serialize_group(
        group: FieldGroup,
        include_fields: bool = True,
        submissions_count: Optional[int] = None,
    ) -> Dict[str, Any]:
        result = {
            "id": group.id,
            "key": group.key,
            "title": group.title,
            "description": group.description,
            "location": group.location,
            "position": group.position,
            "active": group.active,
            "public_url": group.public_url,
            "created_at": group.created_at,
        }
        if include_fields:
            result["fields"] = [FieldDefinitionService.serialize_field(f) for f in group.fields]
        if submissions_count is not None:
            result["submissions_count"] = submissions_count
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _ensure_group_key_free(db: Session, key: str, exclude_id: Optional[int] = None) -> None:
        query = db.query(FieldGroup.id).filter(FieldGroup.key == key)
        if exclude_id:
            query = query.filter(FieldGroup.id != exclude_id)
        if query.first() is not None:
            raise ConflictError(f"Field group key '{key}' is already taken")

    @staticmethod
    def _ensure_field_key_free(db: Session, key: str, exclude_id: Optional[int] = None) -> None:
        query = db.query(CustomField.id).filter(CustomField.key == key)
        if exclude_id:
            query = query.filter(CustomField.id != exclude_id)
        if query.first() is not None:
            raise ConflictError(f"Field key '{key}' is already taken")

    @staticmethod
    def _commit(db: Session, conflict_message: str) -> None:
        try:
            db.commit()
        except IntegrityError:
            # unique index caught a concurrent write the lookup missed
            db.rollback()
            raise ConflictError(conflict_message)
