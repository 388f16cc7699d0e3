import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"
os.environ["SUPABASE_URL"] = "https://identity.test"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-role-key"
os.environ["WORKER_AUTH_TOKEN"] = "worker-token"
os.environ["PAYOS_CLIENT_ID"] = "payos-client"
os.environ["PAYOS_API_KEY"] = "payos-api-key"
os.environ["PAYOS_CHECKSUM_KEY"] = "payos-checksum"
os.environ["R2_BUCKET_NAME"] = "test-bucket"
os.environ["R2_PUBLIC_URL"] = "https://cdn.test"
os.environ["LOG_LEVEL"] = "WARNING"

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from auditionapi.config import settings
from auditionapi.database.session import get_db
from auditionapi.main import app as application
from auditionapi.models import Base, User
from auditionapi.services.identity_admin_client import IdentityAdminClient
from auditionapi.services.payos_client import PayOSClient
from auditionapi.services.storage_service import StorageService

API = settings.API_V1_STR

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
)


def make_token(user_id: str, secret: str = "test-jwt-secret", expires_in: int = 3600) -> str:
    claims = {
        "sub": user_id,
        "aud": "authenticated",
        "role": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(claims, secret, algorithm="HS256")


def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


WORKER_HEADERS = {"Authorization": "Bearer worker-token"}


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_user(db_session):
    """Factory: insert a user row and return its id"""

    def _make_user(diamonds: int = 0, is_admin: bool = False, user_id: str = None, **fields) -> str:
        user = User(
            id=user_id or str(uuid.uuid4()),
            email=f"{uuid.uuid4().hex[:8]}@example.com",
            display_name="Tester",
            diamonds=diamonds,
            is_admin=is_admin,
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        return user.id

    return _make_user


@pytest.fixture
def fake_storage():
    storage = Mock(spec=StorageService)
    storage.upload_data_url.side_effect = (
        lambda data_url, prefix: f"https://cdn.test/{prefix}/{uuid.uuid4().hex}.png"
    )
    return storage


@pytest.fixture
def fake_identity_admin():
    identity = Mock(spec=IdentityAdminClient)
    identity.update_password = AsyncMock(return_value=None)
    return identity


@pytest.fixture
def payos_client():
    return PayOSClient(settings)


@pytest.fixture
def app(db_session, fake_storage, fake_identity_admin, payos_client):
    def override_get_db():
        yield db_session

    application.dependency_overrides[get_db] = override_get_db
    application.container.storage_service.override(providers.Object(fake_storage))
    application.container.identity_admin.override(providers.Object(fake_identity_admin))
    application.container.payos_client.override(providers.Object(payos_client))
    try:
        yield application
    finally:
        application.dependency_overrides.clear()
        application.container.storage_service.reset_override()
        application.container.identity_admin.reset_override()
        application.container.payos_client.reset_override()


@pytest.fixture
def client(app):
    return TestClient(app)


def get_user(db_session, user_id: str) -> User:
    db_session.expire_all()
    return db_session.get(User, user_id)
