from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import require_admin
from app.routers.field_groups_router import CustomFieldUpdate, field_payload
from app.services.activity_service import ActivityService
from app.services.field_definition_service import FieldDefinitionService

router = APIRouter()


@router.get("/{field_id}")
def get_custom_field(
    field_id: int,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    return FieldDefinitionService.serialize_field(FieldDefinitionService.require_field_by_id(db, field_id))


@router.put("/{field_id}")
def update_custom_field(
    field_id: int,
    payload: CustomFieldUpdate,
    request: Request,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    data = field_payload(payload)

    existing = FieldDefinitionService.serialize_field(FieldDefinitionService.require_field_by_id(db, field_id))
    changes = ActivityService.calculate_changes(existing, data)

    field = FieldDefinitionService.update_field(db, field_id, data)

    ActivityService.log(
        db=db,
        action="UPDATE",
        entity_type="custom_field",
        entity_id=field_id,
        actor=admin,
        details={"key": field.key, "changes": changes},
        request=request,
    )
    return FieldDefinitionService.serialize_field(field)


@router.delete("/{field_id}")
def delete_custom_field(
    field_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    """Delete a field together with every stored value for it"""
    key = FieldDefinitionService.delete_field(db, field_id)

    ActivityService.log(
        db=db,
        action="DELETE",
        entity_type="custom_field",
        entity_id=field_id,
        actor=admin,
        details={"key": key},
        request=request,
    )
    return {"message": "Custom field deleted successfully"}
