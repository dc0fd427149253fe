"""
Error kinds raised by the custom fields core.

Definition-store and value-store errors propagate to the caller unchanged;
the HTTP layer maps them to status codes in ``app.main``.
ResolutionFailedError is soft and is always recovered inside the services.
"""
from typing import Dict, Optional


class CustomFieldsError(Exception):
    """Base class for all custom fields errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(CustomFieldsError):
    pass


class ConflictError(CustomFieldsError):
    pass


class UnsupportedCapabilityError(CustomFieldsError):
    pass


class ValidationFailedError(CustomFieldsError):
    def __init__(self, errors: Dict[str, str], message: Optional[str] = None):
        super().__init__(message or "The given data was invalid.")
        self.errors = errors


class ResolutionFailedError(CustomFieldsError):
    def __init__(self, model_type: str, entity_id, message: Optional[str] = None):
        super().__init__(message or f"Could not resolve {model_type} #{entity_id}")
        self.model_type = model_type
        self.entity_id = entity_id
