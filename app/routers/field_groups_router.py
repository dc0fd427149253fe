from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any

from app.core.database import get_db
from app.core.security import require_admin
from app.schemas.custom_fields import ConditionalLogic, FieldType, LocationRule, Wrapper
from app.services.activity_service import ActivityService
from app.services.field_definition_service import FieldDefinitionService

router = APIRouter()


class FieldGroupCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    key: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    location: Optional[List[LocationRule]] = None
    position: Optional[int] = 0
    active: bool = True


class FieldGroupUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    key: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    location: Optional[List[LocationRule]] = None
    position: Optional[int] = None
    active: Optional[bool] = None


class CustomFieldCreate(BaseModel):
    label: str = Field(..., min_length=1, max_length=255)
    name: Optional[str] = Field(None, max_length=255)
    key: str = Field(..., min_length=1, max_length=255)
    type: FieldType
    instructions: Optional[str] = None
    required: bool = False
    default_value: Optional[Any] = None
    placeholder: Optional[str] = None
    choices: Optional[Dict[str, str]] = None
    multiple: bool = False
    model_type: Optional[str] = None
    conditional_logic: Optional[ConditionalLogic] = None
    wrapper: Optional[Wrapper] = None
    order: Optional[int] = None


class CustomFieldUpdate(BaseModel):
    label: Optional[str] = Field(None, min_length=1, max_length=255)
    name: Optional[str] = Field(None, max_length=255)
    key: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[FieldType] = None
    instructions: Optional[str] = None
    required: Optional[bool] = None
    default_value: Optional[Any] = None
    placeholder: Optional[str] = None
    choices: Optional[Dict[str, str]] = None
    multiple: Optional[bool] = None
    model_type: Optional[str] = None
    conditional_logic: Optional[ConditionalLogic] = None
    wrapper: Optional[Wrapper] = None
    order: Optional[int] = None


class ReorderFieldsRequest(BaseModel):
    field_ids: List[int] = Field(..., min_length=1)


class FieldOrder(BaseModel):
    id: int
    order: int


class SetFieldOrdersRequest(BaseModel):
    fields: List[FieldOrder] = Field(..., min_length=1)


def field_payload(schema: BaseModel) -> Dict[str, Any]:
    """Dump only the attributes the caller sent, with typed blobs in storage shape."""
    data = schema.model_dump(mode="json", by_alias=True, exclude_unset=True)
    if getattr(schema, "wrapper", None) is not None:
        data["wrapper"] = schema.wrapper.to_storage()
    return data


@router.get("")
@router.get("/")
def get_field_groups(
    active_only: bool = False,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    groups = FieldDefinitionService.list_groups(db, active_only=active_only)
    counts = FieldDefinitionService.submission_counts(db)
    return {
        "field_groups": [
            FieldDefinitionService.serialize_group(g, submissions_count=counts.get(g.id, 0)) for g in groups
        ]
    }


@router.post("", status_code=201)
@router.post("/", status_code=201)
def create_field_group(
    payload: FieldGroupCreate,
    request: Request,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    group = FieldDefinitionService.create_group(db, payload.model_dump(mode="json"))

    ActivityService.log(
        db=db,
        action="CREATE",
        entity_type="field_group",
        entity_id=group.id,
        actor=admin,
        details={"key": group.key, "title": group.title},
        request=request,
    )
    return FieldDefinitionService.serialize_group(group)


@router.get("/{group_id}")
def get_field_group(
    group_id: int,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    group = FieldDefinitionService.require_group_by_id(db, group_id)
    return FieldDefinitionService.serialize_group(group)


@router.put("/{group_id}")
def update_field_group(
    group_id: int,
    payload: FieldGroupUpdate,
    request: Request,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    data = payload.model_dump(mode="json", exclude_unset=True)

    existing = FieldDefinitionService.serialize_group(
        FieldDefinitionService.require_group_by_id(db, group_id), include_fields=False
    )
    changes = ActivityService.calculate_changes(existing, data)

    group = FieldDefinitionService.update_group(db, group_id, data)

    ActivityService.log(
        db=db,
        action="UPDATE",
        entity_type="field_group",
        entity_id=group_id,
        actor=admin,
        details={"key": group.key, "changes": changes},
        request=request,
    )
    return FieldDefinitionService.serialize_group(group)


@router.delete("/{group_id}")
def delete_field_group(
    group_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    key = FieldDefinitionService.delete_group(db, group_id)

    ActivityService.log(
        db=db,
        action="DELETE",
        entity_type="field_group",
        entity_id=group_id,
        actor=admin,
        details={"key": key},
        request=request,
    )
    return {"message": "Field group deleted successfully"}


@router.post("/{group_id}/reorder-fields")
def reorder_fields(
    group_id: int,
    payload: ReorderFieldsRequest,
    request: Request,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    fields = FieldDefinitionService.reorder_fields(db, group_id, payload.field_ids)

    ActivityService.log(
        db=db,
        action="REORDER",
        entity_type="field_group",
        entity_id=group_id,
        actor=admin,
        details={"field_ids": payload.field_ids},
        request=request,
    )
    return {"fields": [FieldDefinitionService.serialize_field(f) for f in fields]}


@router.post("/{group_id}/fields", status_code=201)
def create_custom_field(
    group_id: int,
    payload: CustomFieldCreate,
    request: Request,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    field = FieldDefinitionService.create_field(db, group_id, field_payload(payload))

    ActivityService.log(
        db=db,
        action="CREATE",
        entity_type="custom_field",
        entity_id=field.id,
        actor=admin,
        details={"key": field.key, "field_group_id": group_id},
        request=request,
    )
    return FieldDefinitionService.serialize_field(field)


@router.post("/{group_id}/fields/reorder")
def set_field_orders(
    group_id: int,
    payload: SetFieldOrdersRequest,
    request: Request,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    orders = [item.model_dump() for item in payload.fields]
    fields = FieldDefinitionService.set_field_orders(db, group_id, orders)

    ActivityService.log(
        db=db,
        action="REORDER",
        entity_type="field_group",
        entity_id=group_id,
        actor=admin,
        details={"fields": orders},
        request=request,
    )
    return {"fields": [FieldDefinitionService.serialize_field(f) for f in fields]}
