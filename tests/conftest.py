"""Shared pytest fixtures: in-memory database, session store and image service."""

import json
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.api.deps import get_image_client
from storefront.data.database import build_engine, get_db, init_db
from storefront.data.models import ListingModel, UserModel
from storefront.domain.errors import ImageUploadFailed
from storefront.domain.schemas import ImageRef
from storefront.main import create_app
from storefront.tasks import images


class MemorySessionStore:
    """Session store kept in a dict; values go through JSON like the Redis store."""

    def __init__(self):
        self.sessions = {}
        self.ttls = {}

    def load(self, session_id):
        raw = self.sessions.get(session_id)
        return json.loads(raw) if raw is not None else None

    def save(self, session_id, data, ttl):
        self.sessions[session_id] = json.dumps(data)
        self.ttls[session_id] = ttl

    def delete(self, session_id):
        self.sessions.pop(session_id, None)
        self.ttls.pop(session_id, None)


class FakeImageClient:
    """Records uploads and deletions instead of calling the image service."""

    def __init__(self):
        self.uploads = []
        self.deleted = []
        self.fail_upload = False
        self.fail_delete = False

    def upload(self, data, mime_type, folder):
        if self.fail_upload:
            raise ImageUploadFailed("Invalid image file")
        self.uploads.append({"data": data, "mime_type": mime_type, "folder": folder})
        n = len(self.uploads)
        return ImageRef(url=f"https://images.test/{folder}/img{n}.jpg", filename=f"{folder}/img{n}")

    def delete(self, filename):
        if self.fail_delete:
            raise ImageUploadFailed("Image service unavailable")
        self.deleted.append(filename)
        return True


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def image_client():
    return FakeImageClient()


@pytest.fixture
def session_store():
    return MemorySessionStore()


@pytest.fixture
def app(session_factory, image_client, session_store, monkeypatch):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    application = create_app(session_store=session_store, init_database=False)
    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_image_client] = lambda: image_client
    # the cleanup task builds its own client
    monkeypatch.setattr(images, "build_image_client", lambda: image_client)
    return application


@pytest.fixture
def make_client(app):
    """Each client has its own cookie jar, i.e. its own browser session."""
    clients = []

    def _make():
        c = TestClient(app)
        clients.append(c)
        return c

    yield _make
    for c in clients:
        c.close()


@pytest.fixture
def client(make_client):
    return make_client()


def register(client, username, email=None, password="secret123", **kwargs):
    return client.post(
        "/register",
        data={"username": username, "email": email or f"{username}@example.com", "password": password},
        **kwargs,
    )


def login(client, username, password="secret123", **kwargs):
    return client.post("/login", data={"username": username, "password": password}, **kwargs)


def create_listing(client, title="Desk lamp", price="50", description="Barely used", files=None, **kwargs):
    return client.post(
        "/listings",
        data={"title": title, "description": description, "price": price},
        files=files,
        **kwargs,
    )


def get_listing(db, title):
    db.expire_all()
    return db.execute(select(ListingModel).where(ListingModel.title == title)).scalar_one_or_none()


def get_user(db, username):
    db.expire_all()
    return db.execute(select(UserModel).where(UserModel.username == username)).scalar_one_or_none()


@pytest.fixture
def alice(make_client):
    c = make_client()
    register(c, "alice")
    return c


@pytest.fixture
def bob(make_client):
    c = make_client()
    register(c, "bob")
    return c
