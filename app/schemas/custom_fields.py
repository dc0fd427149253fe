from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class FieldType(str, Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    EMAIL = "email"
    URL = "url"
    PASSWORD = "password"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    COLOR = "color"
    TRUE_FALSE = "true_false"
    MODEL = "model"
    # front-end only types, formatted with the fallback
    FILE = "file"
    IMAGE = "image"
    WYSIWYG = "wysiwyg"


CHOICE_TYPES = {FieldType.SELECT.value, FieldType.RADIO.value, FieldType.CHECKBOX.value}


class ConditionOperator(str, Enum):
    EQUALS = "=="
    NOT_EQUALS = "!="
    EMPTY = "empty"
    NOT_EMPTY = "not_empty"


class ConditionRule(BaseModel):
    field: str
    operator: ConditionOperator = ConditionOperator.EQUALS
    value: Optional[Any] = None


class LocationRule(BaseModel):
    param: str
    operator: str = "=="
    value: Any = None


class Wrapper(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    width: Optional[str] = None
    class_: Optional[str] = Field(None, alias="class")
    id: Optional[str] = None

    def to_storage(self) -> Dict[str, str]:
        return self.model_dump(by_alias=True, exclude_none=True)


# OR of AND groups: [[rule, rule], [rule]]
ConditionalLogic = List[List[ConditionRule]]
