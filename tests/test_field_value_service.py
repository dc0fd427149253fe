import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.exc import StatementError
from sqlalchemy.orm import sessionmaker

from app.core.config import DB_SCHEMA
from app.core.exceptions import NotFoundError, UnsupportedCapabilityError
from app.models import Base, FieldValue
from app.models.mixins import EntityRef
from app.services.field_definition_service import FieldDefinitionService
from app.services.field_value_service import FieldValueService

PRODUCT_FIELDS = [
    {"label": "Color", "key": "color", "type": "select", "choices": {"red": "Red", "blue": "Blue"}},
    {"label": "Tags", "key": "tags", "type": "checkbox", "multiple": True},
    {"label": "Price", "key": "price", "type": "number"},
]


@pytest.fixture
def product_group(make_group):
    return make_group(key="product", fields=PRODUCT_FIELDS)


def test_scalar_values_are_wrapped_in_a_list(db, product_group):
    ref = EntityRef.of("Category", 1)

    FieldValueService.set_value(db, ref, "color", "red")

    assert FieldValueService.get_value(db, ref, "color") == ["red"]


def test_list_values_are_stored_as_given(db, product_group):
    ref = EntityRef.of("Category", 1)

    FieldValueService.set_value(db, ref, "tags", ["new", "sale"])

    assert FieldValueService.get_value(db, ref, "tags") == ["new", "sale"]


def test_normalize_value():
    assert FieldValueService.normalize_value("x") == ["x"]
    assert FieldValueService.normalize_value(None) == [None]
    assert FieldValueService.normalize_value(("a", "b")) == ["a", "b"]
    assert FieldValueService.normalize_value([]) == []


def test_set_values_replaces_existing_values(db, product_group):
    ref = EntityRef.of("Category", 1)
    FieldValueService.set_values(db, ref, {"color": "red", "price": 10})

    FieldValueService.set_values(db, ref, {"color": "blue"})

    assert FieldValueService.get_values(db, ref) == {"color": ["blue"], "price": [10]}
    assert db.query(FieldValue).count() == 2


def test_set_value_unknown_key_raises(db, product_group):
    ref = EntityRef.of("Category", 1)

    with pytest.raises(NotFoundError):
        FieldValueService.set_value(db, ref, "nope", "x")

    assert db.query(FieldValue).count() == 0


def test_set_values_skips_unknown_keys(db, product_group):
    ref = EntityRef.of("Category", 1)

    skipped = FieldValueService.set_values(db, ref, {"color": "red", "nope": "x"})

    assert skipped == ["nope"]
    assert FieldValueService.get_values(db, ref) == {"color": ["red"]}


def test_values_are_scoped_by_entity_type_and_id(db, product_group):
    category = EntityRef.of("Category", 1)
    brand = EntityRef.of("Brand", 1)
    other = EntityRef.of("Category", 2)

    FieldValueService.set_value(db, category, "color", "red")
    FieldValueService.set_value(db, brand, "color", "blue")

    assert FieldValueService.get_value(db, category, "color") == ["red"]
    assert FieldValueService.get_value(db, brand, "color") == ["blue"]
    assert FieldValueService.get_values(db, other) == {}


def test_entity_id_is_compared_as_string(db, product_group):
    FieldValueService.set_value(db, EntityRef.of("Category", 7), "price", 3)

    assert FieldValueService.get_value(db, EntityRef.of("Category", "7"), "price") == [3]


def test_get_value_missing_returns_none(db, product_group):
    assert FieldValueService.get_value(db, EntityRef.of("Category", 1), "color") is None


def test_delete_values_removes_only_that_entity(db, product_group):
    first = EntityRef.of("Category", 1)
    second = EntityRef.of("Category", 2)
    FieldValueService.set_values(db, first, {"color": "red", "price": 1})
    FieldValueService.set_values(db, second, {"color": "blue"})

    deleted = FieldValueService.delete_values(db, first)

    assert deleted == 2
    assert FieldValueService.get_values(db, first) == {}
    assert FieldValueService.get_values(db, second) == {"color": ["blue"]}


def test_clone_values_copies_independently(db, product_group):
    source = EntityRef.of("Category", 1)
    target = EntityRef.of("Category", 2)
    FieldValueService.set_values(db, source, {"color": "red", "tags": ["a", "b"]})

    copied = FieldValueService.clone_values(db, source, target)
    FieldValueService.set_value(db, source, "tags", ["changed"])

    assert copied == 2
    assert FieldValueService.get_value(db, target, "tags") == ["a", "b"]
    assert FieldValueService.get_value(db, target, "color") == ["red"]


def test_mixin_reads_and_writes_through_the_session(db, product_group, entities):
    category = entities["category"]

    category.set_custom_field("color", "red")

    assert category.get_custom_field("color") == ["red"]
    assert category.get_all_custom_fields() == {"color": ["red"]}
    assert category.delete_custom_fields() == 1


def test_ref_for_requires_capability(db, entities):
    assert FieldValueService.ref_for(entities["brand"]) == EntityRef("Brand", str(entities["brand"].id))

    with pytest.raises(UnsupportedCapabilityError):
        FieldValueService.ref_for(entities["school"])


def test_set_values_is_all_or_nothing(db, product_group):
    ref = EntityRef.of("Category", 1)

    # the second entry cannot be stored as JSON
    with pytest.raises((StatementError, TypeError)):
        FieldValueService.set_values(db, ref, {"color": "red", "price": object()})

    assert FieldValueService.get_values(db, ref) == {}
    assert db.query(FieldValue).count() == 0


def test_set_values_failure_keeps_previous_values(db, product_group):
    ref = EntityRef.of("Category", 1)
    FieldValueService.set_values(db, ref, {"color": "blue", "price": 3})

    with pytest.raises((StatementError, TypeError)):
        FieldValueService.set_values(db, ref, {"color": "red", "price": object()})

    assert FieldValueService.get_values(db, ref) == {"color": ["blue"], "price": [3]}


def test_mixin_bulk_save_returns_skipped_keys(db, product_group, entities):
    category = entities["category"]

    skipped = category.set_custom_fields({"color": "red", "tags": ["a"], "nope": 1})

    assert skipped == ["nope"]
    assert category.get_all_custom_fields() == {"color": ["red"], "tags": ["a"]}


def test_first_write_race_keeps_the_last_value(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'values.db'}").execution_options(
        schema_translate_map={DB_SCHEMA: None}
    )
    Base.metadata.create_all(bind=engine)
    make_session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    setup, first_writer, second_writer = make_session(), make_session(), make_session()
    ref = EntityRef.of("Category", 1)
    raced = []

    # the first writer stores its value after the second writer has started
    @event.listens_for(second_writer, "do_orm_execute")
    def first_writer_lands_first(orm_execute_state):
        if orm_execute_state.is_insert and not raced:
            raced.append(True)
            FieldValueService.set_value(first_writer, ref, "color", "red")

    try:
        group = FieldDefinitionService.create_group(setup, {"title": "Product", "key": "product"})
        FieldDefinitionService.create_field(setup, group.id, {"label": "Color", "key": "color", "type": "text"})

        stored = FieldValueService.set_value(second_writer, ref, "color", "blue")

        assert raced == [True]
        assert stored.value == ["blue"]
        assert FieldValueService.get_value(setup, ref, "color") == ["blue"]
        assert setup.query(FieldValue).count() == 1
    finally:
        for session in (setup, first_writer, second_writer):
            session.close()
        engine.dispose()
