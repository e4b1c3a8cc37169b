# hazardscan/api/dependencies.py
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from hazardscan.core.config import settings
from hazardscan.core.constants import UserStatus
from hazardscan.core.exceptions import Forbidden, Unauthenticated
from hazardscan.core.identity import Identity
from hazardscan.db.database import get_db
from hazardscan.db.models.user import User
from hazardscan.services.inspection_service import InspectionService, PipelineConfig
from hazardscan.services.quota_service import QuotaLedger
from hazardscan.services.user_service import UserService

security = HTTPBearer(auto_error=False)


async def get_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Identity:
    """Verify the bearer session token"""
    if not credentials or not credentials.credentials:
        raise Unauthenticated("Authentication required")
    return request.app.state.identity_provider.resolve(credentials.credentials)


async def get_current_user(
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
) -> User:
    """App user for the verified identity, created on first request"""
    return await UserService(db).ensure_user(identity)


async def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Verify user is active"""
    if current_user.status != UserStatus.ACTIVE.value:
        raise Forbidden("User is inactive")
    return current_user


async def require_superadmin(
    identity: Identity = Depends(get_identity),
    current_user: User = Depends(get_current_active_user),
) -> User:
    """Only callers whose identity carries the superadmin role"""
    if identity.role != settings.SUPERADMIN_ROLE:
        raise Forbidden("Superadmin role required")
    return current_user


def get_quota_ledger(db: AsyncSession = Depends(get_db)) -> QuotaLedger:
    return QuotaLedger(db, default_limit=settings.MONTHLY_INSPECTION_LIMIT)


def get_inspection_service(
    request: Request,
    db: AsyncSession = Depends(get_db),
    quota: QuotaLedger = Depends(get_quota_ledger),
) -> InspectionService:
    state = request.app.state
    return InspectionService(
        session=db,
        normalizer=state.normalizer,
        publisher=state.publisher,
        analyzer=state.analyzer,
        quota=quota,
        usage=state.usage_recorder,
        config=PipelineConfig(
            max_image_bytes=settings.MAX_IMAGE_BYTES,
            error_message_max_chars=settings.ERROR_MESSAGE_MAX_CHARS,
            input_cost_per_1k=settings.OPENAI_INPUT_COST_PER_1K,
            output_cost_per_1k=settings.OPENAI_OUTPUT_COST_PER_1K,
        ),
    )
