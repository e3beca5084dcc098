import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bookswap.core.database import Base, get_db
from bookswap.main import app
from bookswap.services import auth_service, book_service

JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00\xff\xd9"


@pytest.fixture
def db():
    # fresh in-memory database per test
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_user(db, n: int):
    return auth_service.register(
        db, name=f"User {n}", department="CSE", register_number=f"REG{n:03d}", year_of_study=2,
        email=f"user{n}@example.com", password=f"pass{n}",
    )


@pytest.fixture
def alice(db):
    return make_user(db, 1)


@pytest.fixture
def bob(db):
    return make_user(db, 2)


@pytest.fixture
def carol(db):
    return make_user(db, 3)


def auth_header(session_payload):
    return {"Authorization": f"Bearer {session_payload['token']}"}


@pytest.fixture
def alices_book(db, alice):
    return book_service.add_book(db, alice["user"]["id"], {"title": "SICP", "author": "Abelson",
                                                           "category": "Programming", "rate": "100"})
