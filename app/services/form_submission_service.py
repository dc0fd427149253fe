from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional, Tuple
from datetime import date
import csv
import io
import logging

from app.core.config import SUBMISSIONS_PAGE_SIZE
from app.core.exceptions import NotFoundError, ResolutionFailedError
from app.models.form_submission import FormSubmission
from app.schemas.custom_fields import FieldType
from app.services.entity_resolver_service import EntityResolverService
from app.services.field_definition_service import FieldDefinitionService
from app.services.field_type_service import FieldTypeService

logger = logging.getLogger(__name__)

CSV_FIXED_HEADERS = ["ID", "Submitted At", "IP Address"]


class FormSubmissionService:
    """Public forms and their append-only submissions."""

    @staticmethod
    def get_public_form(db: Session, key: str) -> Dict[str, Any]:
        group = FieldDefinitionService.require_group(db, key, active_only=True)

        field_model_options = {}
        for field in group.fields:
            if field.type == FieldType.MODEL.value and field.model_type:
                field_model_options[field.key] = EntityResolverService.list_options(db, field.model_type)

        return {
            "field_group": FieldDefinitionService.serialize_group(group),
            "field_model_options": field_model_options,
        }

    @staticmethod
    def submit(
        db: Session,
        key: str,
        data: Optional[Dict[str, Any]],
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> FormSubmission:
        """
        Validate the answers against the group's fields, then insert them as
        one immutable record. A ValidationFailedError leaves nothing behind.
        """
        group = FieldDefinitionService.require_group(db, key, active_only=True)
        normalized = FieldTypeService.validate_submission(group.fields, data)

        submission = FormSubmission(
            field_group_id=group.id,
            data=normalized,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        try:
            db.add(submission)
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(submission)

        logger.info("Stored submission %s for form %s", submission.id, group.key)
        return submission

    @staticmethod
    def list_submissions(
        db: Session,
        group_id: int,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Tuple[List[FormSubmission], int]:
        FieldDefinitionService.require_group_by_id(db, group_id)
        page = max(page, 1)
        page_size = page_size or SUBMISSIONS_PAGE_SIZE

        query = db.query(FormSubmission).filter(FormSubmission.field_group_id == group_id)
        total = query.count()
        items = query.order_by(FormSubmission.created_at.desc(), FormSubmission.id.desc())\
            .offset((page - 1) * page_size).limit(page_size).all()
        return items, total

    @staticmethod
    def get_submission(db: Session, group_id: int, submission_id: int) -> FormSubmission:
        submission = db.query(FormSubmission).filter(FormSubmission.id == submission_id).first()
        if not submission or submission.field_group_id != group_id:
            raise NotFoundError(f"Submission #{submission_id} not found")
        return submission

    @staticmethod
    def get_submission_detail(db: Session, group_id: int, submission_id: int) -> Dict[str, Any]:
        group = FieldDefinitionService.require_group_by_id(db, group_id)
        submission = FormSubmissionService.get_submission(db, group_id, submission_id)
        data = submission.data or {}

        def resolver(model_type, entity_id):
            return EntityResolverService.resolve(db, model_type, entity_id)

        model_field_data = {}
        formatted = {}
        for field in group.fields:
            value = data.get(field.key)
            formatted[field.key] = FieldTypeService.format_value(field, value, resolver)

            if field.type == FieldType.MODEL.value and field.model_type and value:
                model_id = value[0] if isinstance(value, list) else value
                try:
                    model_field_data[field.key] = resolver(field.model_type, model_id)
                except ResolutionFailedError as e:
                    logger.warning("Submission %s: %s", submission.id, e.message)

        return {
            "field_group": FieldDefinitionService.serialize_group(group),
            "submission": FormSubmissionService.serialize_submission(submission),
            "formatted": formatted,
            "model_field_data": model_field_data,
        }

    @staticmethod
    def delete_submission(db: Session, group_id: int, submission_id: int) -> int:
        submission = FormSubmissionService.get_submission(db, group_id, submission_id)
        db.delete(submission)
        db.commit()
        return submission_id

    @staticmethod
    def export_csv(db: Session, group_id: int) -> Tuple[str, str]:
        """Tabular projection of a group's submissions; returns (filename, csv text)."""
        group = FieldDefinitionService.require_group_by_id(db, group_id)
        submissions = db.query(FormSubmission)\
            .filter(FormSubmission.field_group_id == group.id)\
            .order_by(FormSubmission.id).all()

        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(CSV_FIXED_HEADERS + [field.label for field in group.fields])

        for submission in submissions:
            data = submission.data or {}
            row = [
                submission.id,
                submission.created_at.strftime("%Y-%m-%d %H:%M:%S") if submission.created_at else "",
                submission.ip_address or "",
            ]
            for field in group.fields:
                value = data.get(field.key, "")
                if isinstance(value, list):
                    value = ", ".join("" if v is None else str(v) for v in value)
                row.append(value)
            writer.writerow(row)

        filename = f"submissions-{group.key}-{date.today().isoformat()}.csv"
        return filename, output.getvalue()

    @staticmethod
    def serialize_submission(submission: FormSubmission) -> Dict[str, Any]:
        return {
            "id": submission.id,
            "field_group_id": submission.field_group_id,
            "data": submission.data,
            "ip_address": submission.ip_address,
            "user_agent": submission.user_agent,
            "created_at": submission.created_at,
        }
