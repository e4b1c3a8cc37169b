# hazardscan/api/v1/admin_settings.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from hazardscan.api.dependencies import require_superadmin
from hazardscan.core.constants import SETTING_MONTHLY_LIMIT
from hazardscan.core.exceptions import InvalidInput
from hazardscan.db.database import get_db
from hazardscan.db.models.user import User
from hazardscan.db.repositories.setting_repository import SettingRepository
from hazardscan.schemas.setting import Setting, SettingList, SettingUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=SettingList)
async def list_settings(
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
):
    return SettingList(settings=await SettingRepository(db).list_all())


@router.put("/{key}", response_model=Setting)
async def put_setting(
    key: str,
    body: SettingUpdate,
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
):
    """Create or replace one runtime setting"""
    if key == SETTING_MONTHLY_LIMIT:
        try:
            if int(body.value) < 0:
                raise ValueError(body.value)
        except ValueError:
            raise InvalidInput(f"{SETTING_MONTHLY_LIMIT} must be a non-negative integer")

    setting = await SettingRepository(db).upsert(key, body.value, body.description)
    logger.info(f"Setting {key} updated", extra={"user_id": str(admin.id)})
    return setting
