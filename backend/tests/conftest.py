"""
Pytest fixtures for the API and service tests.

The app runs against an in-memory SQLite database (aiosqlite) with the
Firebase dependency replaced by a fixed caller.
"""
import os

# Settings are read when hoa_portal.core.database is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("FIREBASE_PROJECT_ID", "hoa-portal-test")
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:5173")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("OPENAI_API_KEY", "test-key")

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from hoa_portal.core.database import Base, get_db
from hoa_portal.core.security import AuthenticatedUser, get_current_user
from hoa_portal.main import app
from hoa_portal.models import (
    Association,
    Organization,
    OrgMembership,
    Property,
    Resident,
    User,
)
from hoa_portal.models.enums import OrgRole, ResidentType
from hoa_portal.services.recipients import RecipientService
from hoa_portal.services.storage import StorageProviderInterface, StorageService, get_storage_service


class InMemoryStorageProvider(StorageProviderInterface):
    """Storage provider that remembers presigned paths; uploads are marked by hand."""

    def __init__(self):
        self.uploaded: set[str] = set()

    async def generate_presigned_upload_url(self, object_path, mime_type, ttl_seconds):
        expires_at = datetime.utcnow() + timedelta(seconds=ttl_seconds)
        return f"https://storage.test/upload/{object_path}", expires_at

    async def generate_presigned_download_url(self, object_path, ttl_seconds):
        return f"https://storage.test/download/{object_path}"

    async def verify_object_exists(self, object_path):
        return object_path in self.uploaded

    async def delete_object(self, object_path):
        self.uploaded.discard(object_path)
        return True


@dataclass
class Seed:
    org: Organization
    user: User
    association: Association
    property: Property
    owner: Resident


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seed(db) -> Seed:
    """One organization with an admin, an association, a property and its owner."""
    org = Organization(name="Summit Management", slug=f"summit-{uuid.uuid4().hex[:8]}")
    user = User(firebase_uid="firebase-admin-uid", email="admin@summit.test", full_name="Ada Admin")
    db.add_all([org, user])
    await db.flush()

    db.add(OrgMembership(org_id=org.id, user_id=user.id, role=OrgRole.ORG_ADMIN))

    association = Association(org_id=org.id, name="Maple Ridge HOA", city="Austin", state="TX")
    db.add(association)
    await db.flush()
    await RecipientService(db).seed_system_groups(association.id)

    prop = Property(association_id=association.id, address="12 Maple Ridge Dr", city="Austin")
    db.add(prop)
    await db.flush()

    owner = Resident(
        property_id=prop.id,
        first_name="Olivia",
        last_name="Owner",
        email="olivia@example.com",
        resident_type=ResidentType.OWNER,
        is_primary=True,
    )
    db.add(owner)
    await db.commit()

    return Seed(org=org, user=user, association=association, property=prop, owner=owner)


@pytest.fixture
def current_user(seed) -> AuthenticatedUser:
    """The caller every request runs as; tests may change its role or org."""
    user = AuthenticatedUser(uid=seed.user.firebase_uid, email=seed.user.email, email_verified=True)
    user.db_user_id = seed.user.id
    user.org_id = seed.org.id
    user.org_role = OrgRole.ORG_ADMIN.value
    return user


@pytest.fixture
def storage_provider() -> InMemoryStorageProvider:
    return InMemoryStorageProvider()


@pytest_asyncio.fixture
async def client(session_factory, current_user, storage_provider):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = lambda: current_user
    app.dependency_overrides[get_storage_service] = lambda: StorageService(storage_provider)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
