"""DB-backed identity directory: users, company ownership and manager links."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.infrastructure.database.models import Company, Manager, User
from rentdesk.security.rbac import Identity, Role


class DbIdentityDirectory:
    """Implements the IdentityDirectory protocol over the users/companies/managers tables."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_identity(self, user_id: str) -> Optional[Identity]:
        """Active user as an Identity, or None. Unknown role values count as unknown users."""
        user = await self._session.get(User, user_id, populate_existing=True)
        if user is None or not user.is_active:
            return None
        try:
            role = Role(user.role)
        except ValueError:
            return None
        return Identity(id=user.id, email=user.email, role=role)

    async def find_user_id_by_email(self, email: str) -> Optional[str]:
        stmt = select(User.id).where(User.email == email.strip().lower())
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_owned_company(self, user_id: str) -> Optional[int]:
        stmt = (
            select(Company.id)
            .where(Company.owner_id == user_id)
            .order_by(Company.id)
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_managed_company(self, user_id: str) -> Optional[int]:
        stmt = (
            select(Manager.company_id)
            .where(Manager.user_id == user_id, Manager.is_active.is_(True))
            .order_by(Manager.id)
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()
