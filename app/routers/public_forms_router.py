from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import Dict, Any

from app.core.database import get_db
from app.services.form_submission_service import FormSubmissionService

router = APIRouter()


class SubmitFormRequest(BaseModel):
    data: Dict[str, Any] = {}


@router.get("/{key}")
def show_form(key: str, db: Session = Depends(get_db)):
    return FormSubmissionService.get_public_form(db, key)


@router.post("/{key}/submit", status_code=201)
def submit_form(
    key: str,
    payload: SubmitFormRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    submission = FormSubmissionService.submit(
        db,
        key,
        payload.data,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return {
        "message": "Thank you! Your submission has been received.",
        "id": submission.id,
    }
