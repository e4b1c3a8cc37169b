# hazardscan/db/repositories/setting_repository.py
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hazardscan.db.base import utcnow
from hazardscan.db.models.setting import Setting
from hazardscan.db.repositories.base import BaseRepository


class SettingRepository(BaseRepository[Setting]):
    """Repository for admin key/value settings"""

    def __init__(self, session: AsyncSession):
        super().__init__(Setting, session)

    async def get_by_key(self, key: str) -> Optional[Setting]:
        result = await self.session.execute(
            select(Setting).where(Setting.key == key)
        )
        return result.scalar_one_or_none()

    async def get_value(self, key: str) -> Optional[str]:
        setting = await self.get_by_key(key)
        return setting.value if setting else None

    async def list_all(self) -> List[Setting]:
        result = await self.session.execute(select(Setting).order_by(Setting.key))
        return list(result.scalars().all())

    async def upsert(self, key: str, value: str, description: Optional[str] = None) -> Setting:
        setting = await self.get_by_key(key)
        if setting is None:
            return await self.create({"key": key, "value": value, "description": description})

        setting.value = value
        if description is not None:
            setting.description = description
        setting.updated_at = utcnow()
        await self.session.commit()
        await self.session.refresh(setting)
        return setting
