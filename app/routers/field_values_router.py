from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, Union

from app.core.database import get_db
from app.core.security import require_admin
from app.services.entity_fields_service import EntityFieldsService

router = APIRouter()


class EntityFieldsRequest(BaseModel):
    model: str = Field(..., min_length=1)
    entity_id: Optional[Union[int, str]] = None


class SaveValuesRequest(BaseModel):
    model: str = Field(..., min_length=1)
    entity_id: Union[int, str]
    values: Dict[str, Any]


@router.post("/fields")
def get_entity_fields(
    payload: EntityFieldsRequest,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    return EntityFieldsService.get_entity_fields(db, payload.model, payload.entity_id)


@router.post("/values")
def save_entity_values(
    payload: SaveValuesRequest,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    skipped = EntityFieldsService.save_entity_values(db, payload.model, payload.entity_id, payload.values)
    return {"success": True, "skipped": skipped}
