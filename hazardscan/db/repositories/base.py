# hazardscan/db/repositories/base.py
from typing import Any, Generic, TypeVar, Type, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    """Base repository with common CRUD operations"""

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def get(self, id: Any) -> Optional[ModelType]:
        """Get by ID"""
        result = await self.session.execute(
            select(self.model)
            .where(self.model.id == id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create(self, obj_in: dict, commit: bool = True) -> ModelType:
        """
        Create new record.

        With commit=False the row is only flushed, so the caller can group
        it with other writes in one transaction.
        """
        db_obj = self.model(**obj_in)
        self.session.add(db_obj)
        if commit:
            await self.session.commit()
            await self.session.refresh(db_obj)
        else:
            await self.session.flush()
        return db_obj

    async def update(self, id: Any, obj_in: dict) -> Optional[ModelType]:
        """Update record"""
        result = await self.session.execute(
            update(self.model).where(self.model.id == id).values(**obj_in)
        )
        await self.session.commit()
        if result.rowcount == 0:
            return None
        return await self.get(id)

    async def count(self) -> int:
        """Count all records"""
        result = await self.session.execute(select(func.count()).select_from(self.model))
        return result.scalar() or 0
