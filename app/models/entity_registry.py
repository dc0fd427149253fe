"""Registry of entity kinds addressable by name (``model`` fields, value API)."""
from typing import Dict, List, Optional, Type

from app.core.exceptions import NotFoundError
from .mixins import HasCustomFields


class EntityRegistry:
    def __init__(self):
        self._models: Dict[str, Type] = {}

    def register(self, name: str, model: Type) -> None:
        self._models[name] = model

    def names(self) -> List[str]:
        return sorted(self._models)

    def find_model(self, name: str) -> Optional[Type]:
        return self._models.get(name)

    def get_model(self, name: str) -> Type:
        model = self._models.get(name)
        if model is None:
            raise NotFoundError(f"Model '{name}' not found")
        return model

    def supports_custom_fields(self, name: str) -> bool:
        return issubclass(self.get_model(name), HasCustomFields)


entity_registry = EntityRegistry()


def register_entity(name: Optional[str] = None):
    """Class decorator declaring a model as an addressable entity kind."""
    def decorator(model):
        entity_registry.register(name or model.__name__, model)
        return model
    return decorator
