# hazardscan/services/user_service.py
from datetime import datetime
from typing import List, Optional
from uuid import UUID
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from hazardscan.core.constants import UserStatus
from hazardscan.core.exceptions import NotFound
from hazardscan.core.identity import Identity
from hazardscan.db.base import as_naive_utc, utcnow
from hazardscan.db.models.user import User
from hazardscan.db.repositories.user_repository import UserRepository
from hazardscan.schemas.user import UserAdminUpdate

logger = logging.getLogger(__name__)

# Columns that may not be cleared with an explicit null
NON_NULLABLE_FIELDS = {"status", "monthly_inspection_count", "last_reset_date"}


class UserService:
    """App-side user records keyed by the identity provider's user id"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)

    async def ensure_user(self, identity: Identity) -> User:
        return await self.users.get_or_create(identity)

    async def list_users(self, status: Optional[UserStatus] = None) -> List[User]:
        return await self.users.list_users(status)

    async def admin_update(self, user_id: UUID, update: UserAdminUpdate) -> User:
        values = {}
        for field in update.model_fields_set:
            value = getattr(update, field)
            if value is None and field in NON_NULLABLE_FIELDS:
                continue
            if isinstance(value, UserStatus):
                value = value.value
            elif isinstance(value, datetime):
                value = as_naive_utc(value)
            values[field] = value

        if not values:
            user = await self.users.get(user_id)
            if user is None:
                raise NotFound("User not found")
            return user

        values["updated_at"] = utcnow()
        user = await self.users.update(user_id, values)
        if user is None:
            raise NotFound("User not found")

        logger.info(f"Admin updated user fields: {sorted(values)}", extra={"user_id": str(user_id)})
        return user
