# hazardscan/api/v1/users.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from uuid import UUID

from hazardscan.api.dependencies import (
    get_current_active_user,
    get_identity,
    get_quota_ledger,
    require_superadmin,
)
from hazardscan.core.constants import UserStatus
from hazardscan.core.identity import Identity
from hazardscan.db.database import get_db
from hazardscan.db.models.user import User
from hazardscan.schemas.user import User as UserSchema, UserAdminUpdate, UserList, UserMe
from hazardscan.services.quota_service import QuotaLedger
from hazardscan.services.user_service import UserService

router = APIRouter()


@router.get("/me", response_model=UserMe)
async def get_current_user_info(
    identity: Identity = Depends(get_identity),
    current_user: User = Depends(get_current_active_user),
    quota: QuotaLedger = Depends(get_quota_ledger),
):
    """Get current user information and remaining quota"""
    return UserMe(
        user=current_user,
        role=identity.role,
        quota=await quota.snapshot(current_user),
    )


@router.get("/admin", response_model=UserList)
async def list_users(
    status: Optional[UserStatus] = Query(None),
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
):
    """List all users, optionally by status"""
    users = await UserService(db).list_users(status)
    return UserList(users=users)


@router.patch("/admin/{user_id}", response_model=UserSchema)
async def update_user(
    user_id: UUID,
    update: UserAdminUpdate,
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
):
    """Edit a user's status, names or monthly quota counters"""
    return await UserService(db).admin_update(user_id, update)
