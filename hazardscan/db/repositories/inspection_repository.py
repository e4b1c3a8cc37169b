# hazardscan/db/repositories/inspection_repository.py
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID
from sqlalchemy import select, func, and_, desc, asc
from sqlalchemy.ext.asyncio import AsyncSession

from hazardscan.core.constants import SortField, SortOrder
from hazardscan.db.models.inspection import Inspection
from hazardscan.db.models.user import User
from hazardscan.db.repositories.base import BaseRepository


@dataclass
class InspectionFilters:
    user_id: Optional[UUID] = None
    grade: Optional[str] = None
    status: Optional[str] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None

    def clauses(self) -> list:
        clauses = []
        if self.user_id:
            clauses.append(Inspection.user_id == self.user_id)
        if self.grade:
            clauses.append(Inspection.safety_grade == self.grade)
        if self.status:
            clauses.append(Inspection.processing_status == self.status)
        if self.created_from:
            clauses.append(Inspection.created_at >= self.created_from)
        if self.created_to:
            clauses.append(Inspection.created_at <= self.created_to)
        return clauses


SORT_COLUMNS = {
    SortField.CREATED_AT: Inspection.created_at,
    SortField.RISK_SCORE: Inspection.risk_score,
    SortField.HAZARD_COUNT: Inspection.hazard_count,
}


class InspectionRepository(BaseRepository[Inspection]):
    """Repository for Inspection operations"""

    def __init__(self, session: AsyncSession):
        super().__init__(Inspection, session)

    async def get_by_user(
        self,
        user_id: UUID,
        skip: int = 0,
        limit: int = 20
    ) -> List[Inspection]:
        """Get a page of a user's inspections, newest first"""
        result = await self.session.execute(
            select(Inspection)
            .where(Inspection.user_id == user_id)
            .order_by(Inspection.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count_by_user(self, user_id: UUID) -> int:
        result = await self.session.execute(
            select(func.count(Inspection.id)).where(Inspection.user_id == user_id)
        )
        return result.scalar() or 0

    async def search(
        self,
        filters: InspectionFilters,
        sort_by: SortField = SortField.CREATED_AT,
        order: SortOrder = SortOrder.DESC,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """Filtered, sorted page of all inspections joined with owner details"""
        clauses = filters.clauses()
        where = and_(*clauses) if clauses else None

        sort_column = SORT_COLUMNS[sort_by]
        order_by = asc(sort_column) if order == SortOrder.ASC else desc(sort_column)

        query = (
            select(
                Inspection.id,
                Inspection.created_at,
                Inspection.updated_at,
                Inspection.user_id,
                Inspection.image_url,
                Inspection.hazard_count,
                Inspection.risk_score,
                Inspection.safety_grade,
                Inspection.processing_status,
                User.email.label("user_email"),
                User.first_name.label("user_first_name"),
                User.last_name.label("user_last_name"),
            )
            .select_from(Inspection)
            .outerjoin(User, User.id == Inspection.user_id)
            .order_by(order_by, Inspection.id)
            .offset(skip)
            .limit(limit)
        )
        count_query = select(func.count(Inspection.id))
        if where is not None:
            query = query.where(where)
            count_query = count_query.where(where)

        rows = (await self.session.execute(query)).mappings().all()
        total = (await self.session.execute(count_query)).scalar() or 0
        return [dict(row) for row in rows], total

    async def count_total(self) -> int:
        result = await self.session.execute(select(func.count(Inspection.id)))
        return result.scalar() or 0

    async def count_by_column(self, column) -> Dict[str, int]:
        result = await self.session.execute(
            select(column, func.count(Inspection.id))
            .where(column.is_not(None))
            .group_by(column)
        )
        return {key: count for key, count in result.all()}

    async def top_users(self, limit: int = 20) -> List[Dict[str, Any]]:
        """Users with the most inspections"""
        count = func.count(Inspection.id).label("count")
        result = await self.session.execute(
            select(Inspection.user_id, User.email, count)
            .select_from(Inspection)
            .join(User, User.id == Inspection.user_id)
            .group_by(Inspection.user_id, User.email)
            .order_by(count.desc(), User.email)
            .limit(limit)
        )
        return [
            {"user_id": user_id, "email": email, "count": n}
            for user_id, email, n in result.all()
        ]
