import os

# Point the app at an in-memory database before anything imports it
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import pytest
from starlette.testclient import TestClient

from app.core.database import engine, SessionLocal, get_db
from app.core.security import require_admin
from app.main import app
from app.models import Base, Brand, Category, School
from app.services.field_definition_service import FieldDefinitionService


def override_require_admin():
    return {"sub": "admin@example.com", "type": "access"}


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[require_admin] = override_require_admin
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_group(db):
    def _make_group(key="profile", title=None, fields=(), **extra):
        group = FieldDefinitionService.create_group(db, {"title": title or key.title(), "key": key, **extra})
        for field in fields:
            FieldDefinitionService.create_field(db, group.id, field)
        db.refresh(group)
        return group
    return _make_group


@pytest.fixture
def entities(db):
    category = Category(name="Electronics", slug="electronics", description="Gadgets")
    other_category = Category(name="Books", slug="books")
    brand = Brand(name="Acme")
    school = School(name="Riverside High", code="RHS")
    db.add_all([category, other_category, brand, school])
    db.commit()
    return {"category": category, "other_category": other_category, "brand": brand, "school": school}
