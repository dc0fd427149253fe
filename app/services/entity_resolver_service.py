from sqlalchemy.orm import Session
from typing import Any, Dict, List
import logging

from app.core.exceptions import NotFoundError, ResolutionFailedError
from app.models.entity_registry import entity_registry

logger = logging.getLogger(__name__)


class EntityResolverService:
    """Lookups against the external entity kinds referenced by ``model`` fields."""

    @staticmethod
    def display_name(item: Any) -> str:
        return getattr(item, "name", None) or getattr(item, "title", None) or f"Item #{item.id}"

    @staticmethod
    def find_entity(db: Session, model_name: str, entity_id: Any):
        model = entity_registry.get_model(model_name)
        try:
            key = EntityResolverService._coerce_id(model, entity_id)
        except (TypeError, ValueError):
            return None
        return db.get(model, key)

    @staticmethod
    def require_entity(db: Session, model_name: str, entity_id: Any):
        entity = EntityResolverService.find_entity(db, model_name, entity_id)
        if entity is None:
            raise NotFoundError(f"{model_name} #{entity_id} not found")
        return entity

    @staticmethod
    def list_options(db: Session, model_type: str) -> List[Dict[str, Any]]:
        model = entity_registry.find_model(model_type)
        if model is None:
            logger.warning("No entity kind registered for model type '%s'", model_type)
            return []

        query = db.query(model)
        if hasattr(model, "active"):
            query = query.filter(model.active.is_(True))

        return [
            {
                "id": item.id,
                "name": EntityResolverService.display_name(item),
                "description": getattr(item, "description", None),
            }
            for item in query.order_by(model.id).all()
        ]

    @staticmethod
    def resolve(db: Session, model_type: str, entity_id: Any) -> Dict[str, Any]:
        if not model_type or entity_id in (None, ""):
            raise ResolutionFailedError(model_type, entity_id)

        try:
            entity = EntityResolverService.find_entity(db, model_type, entity_id)
        except NotFoundError as e:
            raise ResolutionFailedError(model_type, entity_id, str(e))

        if entity is None:
            raise ResolutionFailedError(model_type, entity_id)

        return {
            "id": entity.id,
            "name": EntityResolverService.display_name(entity),
            "type": model_type,
        }

    @staticmethod
    def _coerce_id(model, entity_id: Any):
        python_type = model.__table__.c.id.type.python_type
        if isinstance(entity_id, python_type):
            return entity_id
        return python_type(entity_id)
