import csv
import io

import pytest

from app.core.exceptions import NotFoundError, ValidationFailedError
from app.models import FormSubmission
from app.services.field_definition_service import FieldDefinitionService
from app.services.form_submission_service import FormSubmissionService

ORDER_FIELDS = [
    {"label": "Name", "key": "order_name", "type": "text", "required": True},
    {"label": "Price", "key": "order_price", "type": "number", "required": True},
    {"label": "Color", "key": "order_color", "type": "select", "choices": {"red": "Red", "blue": "Blue"}},
    {"label": "Tags", "key": "order_tags", "type": "checkbox", "multiple": True},
]


@pytest.fixture
def order_form(make_group):
    return make_group(key="order", fields=ORDER_FIELDS)


def test_submit_stores_normalized_answers(db, order_form):
    submission = FormSubmissionService.submit(
        db, "order",
        {"order_name": "Widget", "order_price": 5, "order_tags": ["a", "b"], "unknown": "x"},
        ip_address="10.0.0.1",
        user_agent="pytest",
    )

    assert submission.id is not None
    assert submission.data == {"order_name": ["Widget"], "order_price": [5], "order_tags": ["a", "b"]}
    assert submission.ip_address == "10.0.0.1"
    assert submission.user_agent == "pytest"


def test_failed_validation_stores_nothing(db, order_form):
    with pytest.raises(ValidationFailedError) as exc_info:
        FormSubmissionService.submit(db, "order", {"order_name": "Widget"})

    assert exc_info.value.errors == {"order_price": "The Price field is required."}
    assert db.query(FormSubmission).count() == 0


def test_submit_to_inactive_or_missing_form(db, make_group):
    make_group(key="closed", active=False)

    with pytest.raises(NotFoundError):
        FormSubmissionService.submit(db, "closed", {})
    with pytest.raises(NotFoundError):
        FormSubmissionService.submit(db, "missing", {})


def test_public_form_includes_model_options(db, make_group, entities):
    make_group(key="feedback", fields=[
        {"label": "Category", "key": "fb_category", "type": "model", "model_type": "Category"},
        {"label": "Comments", "key": "fb_comments", "type": "textarea"},
    ])

    form = FormSubmissionService.get_public_form(db, "feedback")

    assert form["field_group"]["key"] == "feedback"
    assert [f["key"] for f in form["field_group"]["fields"]] == ["fb_category", "fb_comments"]
    names = [option["name"] for option in form["field_model_options"]["fb_category"]]
    assert names == ["Electronics", "Books"]


def test_list_submissions_paginates_newest_first(db, order_form):
    ids = [
        FormSubmissionService.submit(db, "order", {"order_name": f"n{i}", "order_price": i}).id
        for i in range(3)
    ]

    first_page, total = FormSubmissionService.list_submissions(db, order_form.id, page=1, page_size=2)
    second_page, _ = FormSubmissionService.list_submissions(db, order_form.id, page=2, page_size=2)

    assert total == 3
    assert [s.id for s in first_page + second_page] == list(reversed(ids))


def test_submission_lookup_is_scoped_to_group(db, order_form, make_group):
    other = make_group(key="other")
    submission = FormSubmissionService.submit(db, "order", {"order_name": "A", "order_price": 1})

    with pytest.raises(NotFoundError):
        FormSubmissionService.get_submission(db, other.id, submission.id)
    assert FormSubmissionService.get_submission(db, order_form.id, submission.id).id == submission.id


def test_submission_detail_formats_values(db, make_group, entities):
    group = make_group(key="review", fields=[
        {"label": "Color", "key": "rv_color", "type": "select", "choices": {"red": "Red"}},
        {"label": "Category", "key": "rv_category", "type": "model", "model_type": "Category"},
        {"label": "Missing", "key": "rv_missing", "type": "text"},
    ])
    category = entities["category"]
    submission = FormSubmissionService.submit(db, "review", {"rv_color": "red", "rv_category": category.id})

    detail = FormSubmissionService.get_submission_detail(db, group.id, submission.id)

    assert detail["formatted"] == {"rv_color": "Red", "rv_category": "Electronics", "rv_missing": ""}
    assert detail["model_field_data"]["rv_category"] == {
        "id": category.id, "name": "Electronics", "type": "Category",
    }
    assert detail["submission"]["data"]["rv_color"] == ["red"]


def test_submission_detail_survives_deleted_model_entity(db, make_group, entities):
    group = make_group(key="review", fields=[
        {"label": "Category", "key": "rv_category", "type": "model", "model_type": "Category"},
    ])
    submission = FormSubmissionService.submit(db, "review", {"rv_category": 999})

    detail = FormSubmissionService.get_submission_detail(db, group.id, submission.id)

    assert detail["formatted"]["rv_category"] == "999 (Category)"
    assert detail["model_field_data"] == {}


def test_delete_submission(db, order_form):
    submission = FormSubmissionService.submit(db, "order", {"order_name": "A", "order_price": 1})

    FormSubmissionService.delete_submission(db, order_form.id, submission.id)

    assert db.query(FormSubmission).count() == 0


def test_deleting_group_removes_its_submissions(db, order_form):
    FormSubmissionService.submit(db, "order", {"order_name": "A", "order_price": 1})

    FieldDefinitionService.delete_group(db, order_form.id)

    assert db.query(FormSubmission).count() == 0


def test_export_csv(db, order_form):
    FormSubmissionService.submit(
        db, "order", {"order_name": "Widget", "order_price": 5, "order_tags": ["a", "b"]}, ip_address="10.0.0.1"
    )
    FormSubmissionService.submit(db, "order", {"order_name": "Gadget", "order_price": 7})

    filename, content = FormSubmissionService.export_csv(db, order_form.id)
    rows = list(csv.reader(io.StringIO(content)))

    assert filename.startswith("submissions-order-") and filename.endswith(".csv")
    assert rows[0] == ["ID", "Submitted At", "IP Address", "Name", "Price", "Color", "Tags"]
    assert rows[1][2:] == ["10.0.0.1", "Widget", "5", "", "a, b"]
    assert rows[2][2:] == ["", "Gadget", "7", "", ""]
    assert len(rows[1][1]) == len("2024-01-01 00:00:00")


def test_export_csv_for_empty_group_has_header_only(db, order_form):
    _, content = FormSubmissionService.export_csv(db, order_form.id)

    assert list(csv.reader(io.StringIO(content))) == [
        ["ID", "Submitted At", "IP Address", "Name", "Price", "Color", "Tags"],
    ]
