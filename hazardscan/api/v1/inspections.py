# hazardscan/api/v1/inspections.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from datetime import datetime
from uuid import UUID

from hazardscan.api.dependencies import (
    get_current_active_user,
    get_inspection_service,
    require_superadmin,
)
from hazardscan.core.config import settings
from hazardscan.core.constants import ProcessingStatus, SafetyGrade, SortField, SortOrder
from hazardscan.core.exceptions import Forbidden, NotFound
from hazardscan.db.base import as_naive_utc
from hazardscan.db.database import get_db
from hazardscan.db.models.inspection import Inspection as InspectionModel
from hazardscan.db.models.user import User
from hazardscan.db.repositories.inspection_repository import InspectionFilters, InspectionRepository
from hazardscan.db.repositories.usage_repository import UsageRepository
from hazardscan.db.repositories.user_repository import UserRepository
from hazardscan.schemas.inspection import (
    AdminInspectionPage,
    AnalyzeRequest,
    AnalyzeResponse,
    InspectionEnvelope,
    InspectionMetrics,
    InspectionPage,
    StatsResponse,
    UsageSummary,
)
from hazardscan.services.inspection_service import InspectionService

router = APIRouter()


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_image(
    body: AnalyzeRequest,
    current_user: User = Depends(get_current_active_user),
    service: InspectionService = Depends(get_inspection_service),
):
    """Normalize, publish and analyze one workplace image"""
    outcome = await service.analyze(current_user, body)
    return AnalyzeResponse(
        inspection=outcome.inspection,
        analysis=outcome.analysis,
        usage=UsageSummary(
            response_ms=outcome.response_ms,
            model_latency_ms=outcome.model_latency_ms,
            tokens_used=outcome.tokens_used,
            cost=float(outcome.cost) if outcome.cost is not None else None,
        ),
    )


@router.get("/list", response_model=InspectionPage)
async def list_inspections(
    page: int = Query(1),
    page_size: int = Query(20, alias="pageSize"),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Caller's inspections, newest first"""
    page = max(page, 1)
    page_size = clamp(page_size, 1, settings.LIST_PAGE_SIZE_MAX)

    repo = InspectionRepository(db)
    inspections = await repo.get_by_user(current_user.id, skip=(page - 1) * page_size, limit=page_size)
    total = await repo.count_by_user(current_user.id)
    return InspectionPage(inspections=inspections, page=page, page_size=page_size, total=total)


@router.get("/admin/all", response_model=AdminInspectionPage)
async def list_all_inspections(
    user_id: Optional[UUID] = Query(None, alias="userId"),
    grade: Optional[SafetyGrade] = Query(None),
    status: Optional[ProcessingStatus] = Query(None),
    created_from: Optional[datetime] = Query(None, alias="from"),
    created_to: Optional[datetime] = Query(None, alias="to"),
    sort_by: SortField = Query(SortField.CREATED_AT, alias="sortBy"),
    order: SortOrder = Query(SortOrder.DESC),
    page: int = Query(1),
    page_size: int = Query(20, alias="pageSize"),
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
):
    """
    All inspections across users, joined with owner details.

    Query parameters:
    - userId: only this user's inspections
    - grade: safety grade A-F
    - status: pending, processing, completed, failed
    - from / to: inclusive creation-time bounds
    - sortBy: createdAt, riskScore, hazardCount
    - order: asc, desc
    """
    page = max(page, 1)
    page_size = clamp(page_size, 1, settings.ADMIN_PAGE_SIZE_MAX)

    filters = InspectionFilters(
        user_id=user_id,
        grade=grade.value if grade else None,
        status=status.value if status else None,
        created_from=as_naive_utc(created_from),
        created_to=as_naive_utc(created_to),
    )
    rows, total = await InspectionRepository(db).search(
        filters,
        sort_by=sort_by,
        order=order,
        skip=(page - 1) * page_size,
        limit=page_size,
    )
    return AdminInspectionPage(inspections=rows, page=page, page_size=page_size, total=total)


@router.get("/admin/stats", response_model=StatsResponse)
async def inspection_stats(
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_db),
):
    """Aggregate counts plus the most active users"""
    repo = InspectionRepository(db)
    metrics = InspectionMetrics(
        total_inspections=await repo.count_total(),
        total_users=await UserRepository(db).count(),
        by_status=await repo.count_by_column(InspectionModel.processing_status),
        by_grade=await repo.count_by_column(InspectionModel.safety_grade),
        usage=await UsageRepository(db).totals(),
        top_users=await repo.top_users(limit=settings.STATS_TOP_USERS),
    )
    return StatsResponse(metrics=metrics)


@router.get("/{inspection_id}", response_model=InspectionEnvelope)
async def get_inspection(
    inspection_id: str,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a single inspection owned by the caller"""
    try:
        key = UUID(inspection_id)
    except ValueError:
        raise NotFound("Inspection not found")

    inspection = await InspectionRepository(db).get(key)
    if inspection is None:
        raise NotFound("Inspection not found")
    if inspection.user_id != current_user.id:
        raise Forbidden("Inspection belongs to another user")

    return InspectionEnvelope(inspection=inspection)
