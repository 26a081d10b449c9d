"""
Pytest configuration and fixtures for the blog tag service tests.
"""

import os

# Must be set before app.core.config is imported
os.environ.setdefault("DB_URL", "sqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from app.core.database import Base, get_db, enable_sqlite_savepoints
from app.models.tag import Tag
from app.models.article_tag import ArticleTag


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=db_engine
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def test_app(db_session):
    """Create a FastAPI test app without lifespan events."""
    from fastapi import FastAPI
    from app.api.endpoints import tags, article_tags
    from app.api.error_handlers import register_exception_handlers

    test_app = FastAPI(title="Blog API - Test", version="1.0.0")

    test_app.include_router(tags.router, prefix="/api/tags", tags=["tags"])
    test_app.include_router(
        article_tags.router, prefix="/api/article-tags", tags=["article-tags"]
    )
    register_exception_handlers(test_app)

    @test_app.get("/health")
    def health():
        return {"status": "ok"}

    # Override database dependency
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    test_app.dependency_overrides[get_db] = override_get_db

    return test_app


@pytest.fixture(scope="function")
def client(test_app) -> TestClient:
    """Create a test client without entering context manager."""
    return TestClient(test_app, raise_server_exceptions=False)


def _make_tag(db_session, name, slug, use_count=0, is_deleted=False, color=None) -> Tag:
    tag = Tag(
        name=name,
        slug=slug,
        color=color,
        use_count=use_count,
        is_deleted=is_deleted,
    )
    db_session.add(tag)
    db_session.commit()
    db_session.refresh(tag)
    return tag


@pytest.fixture(scope="function")
def tag_factory(db_session):
    """Insert tags directly, bypassing TagStore validation."""

    def factory(name, slug, **kwargs) -> Tag:
        return _make_tag(db_session, name, slug, **kwargs)

    return factory


@pytest.fixture(scope="function")
def java_tag(db_session) -> Tag:
    return _make_tag(db_session, "Java", "java", color="#FF5722")


@pytest.fixture(scope="function")
def python_tag(db_session) -> Tag:
    return _make_tag(db_session, "Python", "python", color="#306998")


@pytest.fixture(scope="function")
def spring_tag(db_session) -> Tag:
    return _make_tag(db_session, "Spring", "spring", color="#6DB33F")


@pytest.fixture(scope="function")
def deleted_tag(db_session) -> Tag:
    return _make_tag(db_session, "Legacy", "legacy", is_deleted=True)


@pytest.fixture(scope="function")
def tagged_article(db_session, java_tag, python_tag) -> int:
    """Article 7 carrying the Java and Python tags."""
    article_id = 7
    db_session.add_all(
        [
            ArticleTag(article_id=article_id, tag_id=java_tag.id),
            ArticleTag(article_id=article_id, tag_id=python_tag.id),
        ]
    )
    db_session.commit()
    return article_id
