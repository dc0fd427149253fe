from sqlalchemy.orm import Session
from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from typing import Any, Dict, List, Optional
import logging

from app.core.exceptions import NotFoundError, UnsupportedCapabilityError
from app.models.custom_field import CustomField
from app.models.field_value import FieldValue
from app.models.mixins import EntityRef, HasCustomFields

logger = logging.getLogger(__name__)


class FieldValueService:
    """
    Polymorphic value store keyed by (field, entity type, entity id).

    Every stored value is a list. ``set_value`` is strict about unknown
    field keys while ``set_values`` skips them, so partial or versioned
    payloads can be saved without failing the whole request.
    """

    @staticmethod
    def normalize_value(value: Any) -> List[Any]:
        if isinstance(value, (list, tuple)):
            return list(value)
        return [value]

    @staticmethod
    def ref_for(entity: Any) -> EntityRef:
        if not isinstance(entity, HasCustomFields):
            raise UnsupportedCapabilityError(
                f"{type(entity).__name__} does not support custom fields. Add the HasCustomFields mixin."
            )
        return entity.custom_fields_ref

    @staticmethod
    def get_values(db: Session, ref: EntityRef) -> Dict[str, List[Any]]:
        rows = db.query(CustomField.key, FieldValue.value)\
            .join(FieldValue, FieldValue.custom_field_id == CustomField.id)\
            .filter(
                FieldValue.entity_type == ref.entity_type,
                FieldValue.entity_id == ref.entity_id,
            )\
            .order_by(CustomField.field_group_id, CustomField.order, CustomField.id)\
            .all()
        return {key: value for key, value in rows}

    @staticmethod
    def get_value(db: Session, ref: EntityRef, field_key: str) -> Optional[List[Any]]:
        row = db.query(FieldValue.value)\
            .join(CustomField, FieldValue.custom_field_id == CustomField.id)\
            .filter(
                CustomField.key == field_key,
                FieldValue.entity_type == ref.entity_type,
                FieldValue.entity_id == ref.entity_id,
            ).first()
        return row[0] if row else None

    @staticmethod
    def set_value(db: Session, ref: EntityRef, field_key: str, value: Any) -> FieldValue:
        field = db.query(CustomField).filter(CustomField.key == field_key).first()
        if not field:
            raise NotFoundError(f"Custom field with key '{field_key}' not found")

        try:
            field_value = FieldValueService._upsert(db, field, ref, value)
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(field_value)
        return field_value

    @staticmethod
    def set_values(db: Session, ref: EntityRef, values: Dict[str, Any]) -> List[str]:
        """
        Upsert every known key in one transaction and return the skipped keys.
        """
        fields = {}
        if values:
            fields = {
                f.key: f for f in db.query(CustomField).filter(CustomField.key.in_(list(values))).all()
            }

        skipped = []
        try:
            for field_key, value in values.items():
                field = fields.get(field_key)
                if not field:
                    skipped.append(field_key)
                    continue
                FieldValueService._upsert(db, field, ref, value)
            db.commit()
        except Exception:
            db.rollback()
            raise

        if skipped:
            logger.debug("Skipped unknown field keys for %s #%s: %s", ref.entity_type, ref.entity_id, skipped)
        return skipped

    @staticmethod
    def delete_values(db: Session, ref: EntityRef) -> int:
        deleted = db.query(FieldValue).filter(
            FieldValue.entity_type == ref.entity_type,
            FieldValue.entity_id == ref.entity_id,
        ).delete(synchronize_session=False)
        db.commit()
        return deleted

    @staticmethod
    def clone_values(db: Session, source: EntityRef, target: EntityRef) -> int:
        rows = db.query(FieldValue).filter(
            FieldValue.entity_type == source.entity_type,
            FieldValue.entity_id == source.entity_id,
        ).all()

        try:
            for row in rows:
                FieldValueService._upsert(db, row.custom_field, target, row.value)
            db.commit()
        except Exception:
            db.rollback()
            raise
        return len(rows)

    @staticmethod
    def _upsert(db: Session, field: CustomField, ref: EntityRef, value: Any) -> FieldValue:
        # a fresh list per row so stored values never share a Python object
        normalized = list(FieldValueService.normalize_value(value))

        # single statement, so a concurrent first insert becomes an update (last writer wins)
        insert = sqlite_insert if db.get_bind().dialect.name == "sqlite" else postgresql_insert
        stmt = insert(FieldValue).values(
            custom_field_id=field.id,
            entity_type=ref.entity_type,
            entity_id=ref.entity_id,
            value=normalized,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["custom_field_id", "entity_type", "entity_id"],
            set_={"value": stmt.excluded["value"], "updated_at": func.now()},
        )
        db.execute(stmt)

        return db.query(FieldValue).populate_existing().filter(
            FieldValue.custom_field_id == field.id,
            FieldValue.entity_type == ref.entity_type,
            FieldValue.entity_id == ref.entity_id,
        ).one()
