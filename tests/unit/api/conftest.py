"""Fixtures for API unit tests: fresh in-memory SQLite per test, seeded identities, AsyncClient."""

import uuid
from typing import Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from rentdesk.api import dependencies
from rentdesk.infrastructure.database import models
from rentdesk.infrastructure.database.session import AsyncSessionLocal, Base, engine
from rentdesk.main import app
from rentdesk.scalability.rate_limiter import FixedWindowRateLimiter, InMemoryRateLimitBackend
from rentdesk.security.auth import create_access_token, hash_password

PASSWORD = "correct-horse-battery"


@pytest.fixture
def login_limiter():
    return FixedWindowRateLimiter(InMemoryRateLimitBackend(), limit=5, window_seconds=60)


@pytest.fixture(autouse=True)
async def database(login_limiter):
    """Schema per test; disposing the engine drops the in-memory database."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    app.dependency_overrides[dependencies.get_login_rate_limiter] = lambda: login_limiter
    yield
    app.dependency_overrides.clear()
    await engine.dispose()


@pytest.fixture
async def async_client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


class Seed:
    """Direct writes for test setup; bypasses the API and the audit log."""

    async def add(self, obj):
        async with AsyncSessionLocal() as session:
            session.add(obj)
            await session.commit()
            await session.refresh(obj)
        return obj

    async def user(self, role: str, email: Optional[str] = None, is_active: bool = True) -> models.User:
        user_id = str(uuid.uuid4())
        email = email or f"{role}-{user_id[:8]}@example.com"
        await self.add(models.AuthIdentity(id=user_id, email=email, password_hash=hash_password(PASSWORD)))
        return await self.add(
            models.User(id=user_id, email=email, role=role, name=role.title(), is_active=is_active)
        )

    async def company(self, company_id: int, owner: Optional[models.User] = None) -> models.Company:
        return await self.add(
            models.Company(
                id=company_id,
                name=f"Company {company_id}",
                owner_id=owner.id if owner else None,
                settings={},
            )
        )

    async def manager(self, company_id: int) -> models.User:
        user = await self.user("manager")
        await self.add(models.Manager(user_id=user.id, company_id=company_id))
        return user

    async def template(self) -> models.CarTemplate:
        return await self.add(models.CarTemplate(brand="Toyota", model="Corolla", body_type="sedan"))

    async def car(self, company_id: int, plate: str = "AB 123", status: str = "available") -> models.CompanyCar:
        template = await self.template()
        return await self.add(
            models.CompanyCar(
                company_id=company_id,
                car_template_id=template.id,
                license_plate=plate,
                price_per_day=40.0,
                status=status,
            )
        )

    async def client(self, company_id: int, user_id: Optional[str] = None) -> models.Client:
        return await self.add(
            models.Client(company_id=company_id, user_id=user_id, name="Ann", surname="Lee", phone="+100200")
        )

    async def audit_logs(self, **filters):
        async with AsyncSessionLocal() as session:
            stmt = select(models.AuditLog).order_by(models.AuditLog.id)
            for name, value in filters.items():
                stmt = stmt.where(getattr(models.AuditLog, name) == value)
            return list((await session.execute(stmt)).scalars().all())

    async def get(self, model, row_id):
        async with AsyncSessionLocal() as session:
            return await session.get(model, row_id)


@pytest.fixture
def seed():
    return Seed()


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def password():
    return PASSWORD
