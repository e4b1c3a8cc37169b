# hazardscan/services/inspection_service.py
"""
Inspection submission pipeline.

Received -> Normalized -> Published -> Analyzed -> Validated -> Persisted

Early exits (no rows written): size guard, quota, undecodable image.
Storage or model-provider failures write a usage log only. Invalid model
output writes a `failed` inspection plus a usage log. Success writes the
`completed` inspection and the quota increment in one transaction, then
the usage log.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from uuid import UUID
import asyncio
import functools
import logging
import time

from sqlalchemy.ext.asyncio import AsyncSession

from hazardscan.core.constants import ANALYZE_ENDPOINT, ProcessingStatus
from hazardscan.core.exceptions import InvalidModelOutput
from hazardscan.db.base import utcnow
from hazardscan.db.models.inspection import Inspection
from hazardscan.db.models.user import User
from hazardscan.db.repositories.inspection_repository import InspectionRepository
from hazardscan.schemas.analysis import AnalysisResult
from hazardscan.schemas.inspection import AnalyzeRequest
from hazardscan.services.analysis_service import Analyzer, ModelResponse, estimate_cost
from hazardscan.services.image_service import (
    ImageNormalizer,
    NormalizedImage,
    decode_base64_image,
    ensure_within_limit,
)
from hazardscan.services.quota_service import QuotaLedger
from hazardscan.services.response_validator import parse_analysis
from hazardscan.services.storage_service import BlobPublisher
from hazardscan.services.usage_service import UsageRecorder

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    max_image_bytes: int = 8_000_000
    error_message_max_chars: int = 500
    input_cost_per_1k: float = 0.0
    output_cost_per_1k: float = 0.0


@dataclass
class AnalyzeOutcome:
    inspection: Inspection
    analysis: AnalysisResult
    response_ms: int
    model_latency_ms: int
    tokens_used: Optional[int]
    cost: Optional[Decimal]


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: max(limit - 3, 0)] + "..."


def image_key(user_id: UUID) -> str:
    return f"inspections/{user_id}/{int(time.time() * 1000)}.webp"


class InspectionService:
    """Runs one inspection request end to end"""

    def __init__(
        self,
        session: AsyncSession,
        normalizer: ImageNormalizer,
        publisher: BlobPublisher,
        analyzer: Analyzer,
        quota: QuotaLedger,
        usage: UsageRecorder,
        config: PipelineConfig,
    ):
        self.session = session
        self.normalizer = normalizer
        self.publisher = publisher
        self.analyzer = analyzer
        self.quota = quota
        self.usage = usage
        self.config = config
        self.inspections = InspectionRepository(session)

    async def normalize(self, image_data: str) -> NormalizedImage:
        """Decode and re-encode off the event loop"""
        raw = decode_base64_image(image_data)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(self.normalizer.normalize, raw))

    async def analyze(self, user: User, request: AnalyzeRequest) -> AnalyzeOutcome:
        started = time.monotonic()
        # Rollbacks expire ORM state, so keep the id as a plain value
        user_id = user.id
        log_extra = {"user_id": str(user_id)}

        # Rejections below happen before any side effect
        if request.image_data is not None:
            ensure_within_limit(request.image_data, self.config.max_image_bytes)
        await self.quota.check_admission(user)
        normalized = await self.normalize(request.image_data) if request.image_data is not None else None

        response: Optional[ModelResponse] = None
        image_url: Optional[str] = None
        try:
            if normalized is not None:
                image_url = await self.publisher.publish(image_key(user_id), normalized.data, normalized.content_type)
            else:
                image_url = str(request.image_url)

            response = await self.analyzer.analyze(image_url)
            analysis = parse_analysis(response.text)
            inspection = await self._store_completed(user_id, image_url, analysis, response)

        except InvalidModelOutput as e:
            logger.error(
                f"Model output failed validation. First 500 chars: {response.text[:500]!r}",
                extra=log_extra,
            )
            failed = await self._store_failed(user_id, image_url, e, response)
            if failed is not None:
                e.details["inspectionId"] = str(failed.id)
            await self._record_failure(user_id, started, e, response)
            raise

        except Exception as e:
            await self.session.rollback()
            await self._record_failure(user_id, started, e, response)
            raise

        response_ms = int((time.monotonic() - started) * 1000)
        cost = estimate_cost(response, self.config.input_cost_per_1k, self.config.output_cost_per_1k)
        await self.usage.record(
            endpoint=ANALYZE_ENDPOINT,
            user_id=user_id,
            success=True,
            response_time_ms=response_ms,
            tokens_used=response.total_tokens,
            api_cost=cost,
        )

        logger.info(
            f"Inspection completed with {inspection.hazard_count} hazards, grade {inspection.safety_grade}",
            extra={**log_extra, "inspection_id": str(inspection.id)},
        )
        return AnalyzeOutcome(
            inspection=inspection,
            analysis=analysis,
            response_ms=response_ms,
            model_latency_ms=response.latency_ms,
            tokens_used=response.total_tokens,
            cost=cost,
        )

    async def _store_completed(
        self,
        user_id: UUID,
        image_url: str,
        analysis: AnalysisResult,
        response: ModelResponse,
    ) -> Inspection:
        # Measured values win over whatever the model claimed
        analysis.metadata.tokens_used = response.total_tokens or 0
        analysis.metadata.analysis_time = response.latency_ms

        now = utcnow()
        inspection = await self.inspections.create({
            "user_id": user_id,
            "image_url": image_url,
            "original_image_url": image_url,
            "hazard_count": analysis.hazard_count,
            "risk_score": analysis.overall_assessment.risk_score,
            "safety_grade": analysis.overall_assessment.safety_grade.value,
            "analysis_results": analysis.to_payload(),
            "processing_status": ProcessingStatus.COMPLETED.value,
            "created_at": now,
            "updated_at": now,
        }, commit=False)
        await self.quota.record_completion(user_id, now)
        await self.session.commit()
        await self.session.refresh(inspection)
        return inspection

    async def _store_failed(
        self,
        user_id: UUID,
        image_url: str,
        error: InvalidModelOutput,
        response: Optional[ModelResponse],
    ) -> Optional[Inspection]:
        message = error.message
        if response is not None and response.text:
            message = f"{message} | output: {response.text}"
        try:
            return await self.inspections.create({
                "user_id": user_id,
                "image_url": image_url,
                "original_image_url": image_url,
                "hazard_count": 0,
                "processing_status": ProcessingStatus.FAILED.value,
                "error_message": truncate(message, self.config.error_message_max_chars),
            })
        except Exception:
            await self.session.rollback()
            logger.exception("Failed to record failed inspection", extra={"user_id": str(user_id)})
            return None

    async def _record_failure(
        self,
        user_id: UUID,
        started: float,
        error: Exception,
        response: Optional[ModelResponse],
    ) -> None:
        await self.usage.record(
            endpoint=ANALYZE_ENDPOINT,
            user_id=user_id,
            success=False,
            response_time_ms=int((time.monotonic() - started) * 1000),
            tokens_used=response.total_tokens if response else None,
            api_cost=(
                estimate_cost(response, self.config.input_cost_per_1k, self.config.output_cost_per_1k)
                if response else None
            ),
            error_type=type(error).__name__,
        )
