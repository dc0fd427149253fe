from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import DATABASE_URL, DB_SCHEMA


def _create_engine(url: str):
    if url.startswith("sqlite"):
        # SQLite has no schemas; tables land in the main database
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        return engine.execution_options(schema_translate_map={DB_SCHEMA: None})
    return create_engine(url, pool_pre_ping=True)


engine = _create_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
