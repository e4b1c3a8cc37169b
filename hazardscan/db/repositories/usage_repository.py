# hazardscan/db/repositories/usage_repository.py
from decimal import Decimal
from typing import Any, Dict
from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from hazardscan.db.models.usage import UsageLog
from hazardscan.db.repositories.base import BaseRepository


class UsageRepository(BaseRepository[UsageLog]):
    """Repository for UsageLog operations (append-only)"""

    def __init__(self, session: AsyncSession):
        super().__init__(UsageLog, session)

    async def totals(self) -> Dict[str, Any]:
        """Aggregate request, failure, token and cost totals"""
        result = await self.session.execute(
            select(
                func.count(UsageLog.id),
                func.coalesce(func.sum(case((UsageLog.success.is_(False), 1), else_=0)), 0),
                func.coalesce(func.sum(UsageLog.tokens_used), 0),
                func.coalesce(func.sum(UsageLog.api_cost), 0),
            )
        )
        requests, failures, tokens, cost = result.one()
        return {
            "requests": int(requests or 0),
            "failures": int(failures or 0),
            "tokens": int(tokens or 0),
            "cost": float(Decimal(str(cost or 0))),
        }
