# hazardscan/services/analysis_service.py
"""Hazard analysis through a hosted vision-capable chat model."""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional, Protocol
import logging
import time

import openai
from openai import AsyncOpenAI

from hazardscan.core.exceptions import UpstreamAuthFailure, UpstreamUnavailable
from hazardscan.core.prompts import USER_INSTRUCTION, build_system_prompt

logger = logging.getLogger(__name__)


@dataclass
class ModelResponse:
    text: str
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None
    latency_ms: int = 0


class Analyzer(Protocol):
    async def analyze(self, image_url: str) -> ModelResponse:
        ...


def extract_text(message: Any) -> str:
    """Assistant content may be a plain string or a list of typed parts"""
    content = getattr(message, "content", None)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, dict):
                if part.get("type") == "text":
                    parts.append(part.get("text") or "")
            elif getattr(part, "type", None) == "text":
                parts.append(getattr(part, "text", "") or "")
        return "".join(parts).strip()
    return ""


def estimate_cost(
    response: ModelResponse,
    input_cost_per_1k: float,
    output_cost_per_1k: float,
) -> Optional[Decimal]:
    """USD cost of one call, rounded to the usage-log precision"""
    if response.prompt_tokens is None and response.completion_tokens is None:
        return None
    cost = (
        Decimal(response.prompt_tokens or 0) * Decimal(str(input_cost_per_1k))
        + Decimal(response.completion_tokens or 0) * Decimal(str(output_cost_per_1k))
    ) / Decimal(1000)
    return cost.quantize(Decimal("0.000001"), rounding=ROUND_HALF_UP)


class HazardAnalyzer:
    """
    Ask the vision model for a JSON hazard report of one image.

    Sampling is deterministic (temperature 0) and the client must be
    built without automatic retries.
    """

    def __init__(self, client: AsyncOpenAI, model: str = "gpt-4o"):
        self.client = client
        self.model = model
        self.system_prompt = build_system_prompt()

    async def analyze(self, image_url: str) -> ModelResponse:
        started = time.monotonic()
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                temperature=0,
                messages=[
                    {"role": "system", "content": self.system_prompt},
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": USER_INSTRUCTION},
                            {"type": "image_url", "image_url": {"url": image_url}},
                        ],
                    },
                ],
            )
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            logger.error(f"Model provider rejected credentials: {e}")
            raise UpstreamAuthFailure("Model provider authentication failed")
        except (openai.APIConnectionError, openai.APITimeoutError) as e:
            logger.error(f"Model provider unreachable: {e}")
            raise UpstreamUnavailable("Model provider is unreachable")
        except openai.APIError as e:
            logger.error(f"Model provider error: {e}")
            raise UpstreamUnavailable("Model provider returned an error")

        latency_ms = int((time.monotonic() - started) * 1000)
        choice = completion.choices[0] if completion.choices else None
        text = extract_text(choice.message) if choice else ""

        usage = completion.usage
        prompt_tokens = completion_tokens = total_tokens = None
        if usage is not None:
            prompt_tokens = usage.prompt_tokens
            completion_tokens = usage.completion_tokens
            total_tokens = usage.total_tokens
            if total_tokens is None:
                total_tokens = (prompt_tokens or 0) + (completion_tokens or 0)

        logger.info(f"Model {self.model} answered in {latency_ms} ms ({total_tokens} tokens)")
        return ModelResponse(
            text=text,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=total_tokens,
            latency_ms=latency_ms,
        )
