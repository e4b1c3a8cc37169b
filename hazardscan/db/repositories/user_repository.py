# hazardscan/db/repositories/user_repository.py
from datetime import datetime
from typing import List, Optional
from uuid import UUID
from sqlalchemy import select, update, case, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hazardscan.core.constants import UserStatus
from hazardscan.core.identity import Identity
from hazardscan.db.base import utcnow
from hazardscan.db.models.user import User
from hazardscan.db.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User operations"""

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_by_external_id(self, external_id: str) -> Optional[User]:
        """Get user by identity-provider id"""
        result = await self.session.execute(
            select(User).where(User.external_id == external_id)
        )
        return result.scalar_one_or_none()

    async def get_or_create(self, identity: Identity) -> User:
        """Return the app user for a verified identity, creating it on first sight"""
        user = await self.get_by_external_id(identity.user_id)
        if user:
            return user

        try:
            return await self.create({
                "external_id": identity.user_id,
                "email": identity.email,
                "first_name": identity.first_name,
                "last_name": identity.last_name,
                "image_url": identity.image_url,
                "inspection_count": 0,
                "monthly_inspection_count": 0,
                "last_reset_date": utcnow(),
                "status": UserStatus.ACTIVE.value,
            })
        except IntegrityError:
            # A concurrent request created the same user first
            await self.session.rollback()
            user = await self.get_by_external_id(identity.user_id)
            if user is None:
                raise
            return user

    async def list_users(self, status: Optional[UserStatus] = None) -> List[User]:
        query = select(User).order_by(User.created_at.desc())
        if status is not None:
            query = query.where(User.status == status.value)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def increment_inspection_counters(
        self,
        user_id: UUID,
        now: datetime,
        month_start: datetime,
        month_end: datetime,
    ) -> bool:
        """
        Count one completed inspection in a single UPDATE statement.

        When the stored reset date lies outside [month_start, month_end) the monthly counter
        restarts at 1 and the reset date is stamped with `now`. Does not
        commit; the caller owns the transaction.
        """
        same_month = and_(User.last_reset_date >= month_start, User.last_reset_date < month_end)
        result = await self.session.execute(
            update(User)
            .where(User.id == user_id)
            .values(
                inspection_count=User.inspection_count + 1,
                monthly_inspection_count=case(
                    (same_month, User.monthly_inspection_count + 1),
                    else_=1,
                ),
                last_reset_date=case(
                    (same_month, User.last_reset_date),
                    else_=now,
                ),
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
