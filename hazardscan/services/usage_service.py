# hazardscan/services/usage_service.py
from decimal import Decimal
from typing import Optional
from uuid import UUID
import logging

from sqlalchemy.ext.asyncio import async_sessionmaker

from hazardscan.db.repositories.usage_repository import UsageRepository

logger = logging.getLogger(__name__)


class UsageRecorder:
    """
    Best-effort writer for usage logs.

    Each record gets its own session and transaction so that a failed
    request transaction cannot take the log down with it, and a failed log
    write never reaches the caller.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def record(
        self,
        *,
        endpoint: str,
        user_id: Optional[UUID],
        success: bool,
        response_time_ms: int,
        tokens_used: Optional[int] = None,
        api_cost: Optional[Decimal] = None,
        error_type: Optional[str] = None,
    ) -> bool:
        try:
            async with self.session_factory() as session:
                await UsageRepository(session).create({
                    "endpoint": endpoint,
                    "user_id": user_id,
                    "success": success,
                    "response_time": response_time_ms,
                    "tokens_used": tokens_used,
                    "api_cost": api_cost,
                    "error_type": error_type[:50] if error_type else None,
                })
            return True
        except Exception:
            logger.exception(
                "Failed to write usage log (ignored)",
                extra={"user_id": str(user_id) if user_id else None},
            )
            return False
