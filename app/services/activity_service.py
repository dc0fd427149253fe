from sqlalchemy.orm import Session
from fastapi import Request
from typing import Optional, Dict, Any
import logging

from app.models.activity_log import ActivityLog

logger = logging.getLogger(__name__)


class ActivityService:
    @staticmethod
    def _normalize_value(value: Any) -> Any:
        if value is None:
            return None
        if hasattr(value, "isoformat"):  # datetime
            return value.isoformat()
        if isinstance(value, (list, tuple)):
            return [ActivityService._normalize_value(v) for v in value]
        if isinstance(value, dict):
            return {k: ActivityService._normalize_value(v) for k, v in value.items()}
        if not isinstance(value, (int, float, bool, str)):
            return str(value)
        return value

    @staticmethod
    def calculate_changes(old: Dict[str, Any], new: Dict[str, Any], exclude=None) -> Dict[str, Dict[str, Any]]:
        exclude = set(exclude or [])
        changes = {}
        for key, new_value in new.items():
            if key in exclude:
                continue
            old_value = ActivityService._normalize_value(old.get(key))
            new_value = ActivityService._normalize_value(new_value)
            if old_value != new_value:
                changes[key] = {"old": old_value, "new": new_value}
        return changes

    @staticmethod
    def log(
        db: Session,
        action: str,
        entity_type: str,
        entity_id=None,
        actor: Optional[Dict[str, Any]] = None,
        details: Optional[Dict[str, Any]] = None,
        request: Optional[Request] = None,
    ) -> None:
        """
        Record an admin change to the schema or the submission log.
        Never raises: a failed audit write must not undo the change itself.
        """
        try:
            entry = ActivityLog(
                actor=(actor or {}).get("sub"),
                action=action,
                entity_type=entity_type,
                entity_id=str(entity_id) if entity_id is not None else None,
                details=ActivityService._normalize_value(details),
                ip_address=request.client.host if request and request.client else None,
                user_agent=request.headers.get("user-agent") if request else None,
            )
            db.add(entry)
            db.commit()
        except Exception:
            logger.exception("Activity log failed for %s %s #%s", action, entity_type, entity_id)
            db.rollback()
