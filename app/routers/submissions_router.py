from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import Optional, List, Dict, Any

from app.core.config import SUBMISSIONS_MAX_PAGE_SIZE, SUBMISSIONS_PAGE_SIZE
from app.core.database import get_db
from app.core.security import require_admin
from app.services.activity_service import ActivityService
from app.services.form_submission_service import FormSubmissionService

router = APIRouter()


class SubmissionResponse(BaseModel):
    id: int
    field_group_id: int
    data: Dict[str, Any]
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: Any


class SubmissionListResponse(BaseModel):
    submissions: List[SubmissionResponse]
    total: int
    page: int
    page_size: int


@router.get("", response_model=SubmissionListResponse)
@router.get("/", response_model=SubmissionListResponse)
def get_submissions(
    group_id: int,
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=SUBMISSIONS_MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    page_size = page_size or SUBMISSIONS_PAGE_SIZE
    items, total = FormSubmissionService.list_submissions(db, group_id, page, page_size)
    return SubmissionListResponse(
        submissions=[FormSubmissionService.serialize_submission(s) for s in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/export")
def export_submissions(
    group_id: int,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    filename, content = FormSubmissionService.export_csv(db, group_id)
    return PlainTextResponse(
        content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{submission_id}")
def get_submission(
    group_id: int,
    submission_id: int,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    return FormSubmissionService.get_submission_detail(db, group_id, submission_id)


@router.delete("/{submission_id}")
def delete_submission(
    group_id: int,
    submission_id: int,
    request: Request,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    FormSubmissionService.delete_submission(db, group_id, submission_id)

    ActivityService.log(
        db=db,
        action="DELETE",
        entity_type="form_submission",
        entity_id=submission_id,
        actor=admin,
        details={"field_group_id": group_id},
        request=request,
    )
    return {"message": "Submission deleted successfully."}
