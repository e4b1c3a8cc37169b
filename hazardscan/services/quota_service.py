# hazardscan/services/quota_service.py
"""
Per-user monthly inspection quota.

The monthly counter is reset lazily: whenever the stored reset date lies
outside the current calendar month (UTC), earlier or later, the effective
count is zero and the next recorded completion restarts the counter at 1.
Admission is a read-only check; the counters move only once an inspection has completed.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from hazardscan.core.constants import SETTING_MONTHLY_LIMIT
from hazardscan.core.exceptions import QuotaExceeded
from hazardscan.db.base import utcnow
from hazardscan.db.models.user import User
from hazardscan.db.repositories.setting_repository import SettingRepository
from hazardscan.db.repositories.user_repository import UserRepository
from hazardscan.schemas.user import QuotaSnapshot

logger = logging.getLogger(__name__)


def month_start(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def next_month_start(now: datetime) -> datetime:
    start = month_start(now)
    if start.month == 12:
        return start.replace(year=start.year + 1, month=1)
    return start.replace(month=start.month + 1)


def in_current_month(value: datetime, now: datetime) -> bool:
    """True when `value` lies in the calendar month containing `now`"""
    return month_start(now) <= value < next_month_start(now)


def effective_monthly_count(user: User, now: datetime) -> int:
    if user.last_reset_date is None or not in_current_month(user.last_reset_date, now):
        return 0
    return user.monthly_inspection_count or 0


class QuotaLedger:
    """Admission checks and completion accounting for the monthly quota"""

    def __init__(self, session: AsyncSession, default_limit: int = 100):
        self.session = session
        self.default_limit = default_limit

    async def resolve_limit(self) -> int:
        """Runtime override from the settings table, else the configured default"""
        value: Optional[str] = await SettingRepository(self.session).get_value(SETTING_MONTHLY_LIMIT)
        if value is None:
            return self.default_limit
        try:
            limit = int(value)
        except ValueError:
            logger.warning(f"Ignoring non-integer {SETTING_MONTHLY_LIMIT} setting: {value!r}")
            return self.default_limit
        return max(limit, 0)

    async def check_admission(self, user: User, now: Optional[datetime] = None) -> int:
        """Raise QuotaExceeded when the user has no inspections left this month"""
        now = now or utcnow()
        limit = await self.resolve_limit()
        used = effective_monthly_count(user, now)
        if used >= limit:
            logger.info(
                f"Quota exceeded ({used}/{limit})",
                extra={"user_id": str(user.id)},
            )
            raise QuotaExceeded(limit=limit, used=used)
        return limit - used

    async def record_completion(self, user_id: UUID, now: Optional[datetime] = None) -> None:
        """
        Count one completed inspection. Must run inside the transaction that
        stores the completed inspection, exactly once per inspection.
        """
        now = now or utcnow()
        updated = await UserRepository(self.session).increment_inspection_counters(
            user_id, now=now, month_start=month_start(now), month_end=next_month_start(now)
        )
        if not updated:
            logger.warning("Quota increment matched no user row", extra={"user_id": str(user_id)})

    async def snapshot(self, user: User, now: Optional[datetime] = None) -> QuotaSnapshot:
        now = now or utcnow()
        limit = await self.resolve_limit()
        used = effective_monthly_count(user, now)
        return QuotaSnapshot(
            limit=limit,
            used=used,
            remaining=max(limit - used, 0),
            resets_at=next_month_start(now),
        )
