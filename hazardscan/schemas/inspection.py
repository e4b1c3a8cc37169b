# hazardscan/schemas/inspection.py
from pydantic import AnyHttpUrl, UUID4, Field, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional
from datetime import datetime

from hazardscan.core.constants import ALLOWED_IMAGE_TYPES, ProcessingStatus
from hazardscan.schemas.analysis import AnalysisResult, CamelModel


class AnalyzeRequest(CamelModel):
    """Exactly one of imageUrl / imageData must be provided"""
    image_url: Optional[AnyHttpUrl] = None
    image_data: Optional[str] = Field(default=None, min_length=1)
    image_type: str = "image/jpeg"

    @field_validator("image_type")
    @classmethod
    def check_image_type(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ALLOWED_IMAGE_TYPES:
            raise ValueError(f"Unsupported image type: {v}")
        return v

    @model_validator(mode="after")
    def exactly_one_source(self):
        if bool(self.image_url) == bool(self.image_data):
            raise ValueError("Provide exactly one of imageUrl or imageData")
        return self


class Inspection(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: UUID4
    user_id: UUID4
    image_url: str
    original_image_url: Optional[str] = None
    hazard_count: int
    risk_score: Optional[int] = None
    safety_grade: Optional[str] = None
    analysis_results: Optional[Dict[str, Any]] = None
    processing_status: ProcessingStatus
    error_message: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class UsageSummary(CamelModel):
    response_ms: int
    model_latency_ms: int
    tokens_used: Optional[int] = None
    cost: Optional[float] = None


class AnalyzeResponse(CamelModel):
    ok: bool = True
    inspection: Inspection
    analysis: AnalysisResult
    usage: UsageSummary


class InspectionEnvelope(CamelModel):
    ok: bool = True
    inspection: Inspection


class InspectionPage(CamelModel):
    ok: bool = True
    inspections: List[Inspection]
    page: int
    page_size: int
    total: int


class AdminInspectionRow(CamelModel):
    id: UUID4
    created_at: datetime
    updated_at: datetime
    user_id: UUID4
    image_url: str
    hazard_count: int
    risk_score: Optional[int] = None
    safety_grade: Optional[str] = None
    processing_status: str
    user_email: Optional[str] = None
    user_first_name: Optional[str] = None
    user_last_name: Optional[str] = None


class AdminInspectionPage(CamelModel):
    ok: bool = True
    inspections: List[AdminInspectionRow]
    page: int
    page_size: int
    total: int


class TopUser(CamelModel):
    user_id: UUID4
    email: Optional[str] = None
    count: int


class UsageTotals(CamelModel):
    requests: int
    failures: int
    tokens: int
    cost: float


class InspectionMetrics(CamelModel):
    total_inspections: int
    total_users: int
    by_status: Dict[str, int]
    by_grade: Dict[str, int]
    usage: UsageTotals
    top_users: List[TopUser]


class StatsResponse(CamelModel):
    ok: bool = True
    metrics: InspectionMetrics
