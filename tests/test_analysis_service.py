"""Tests for the vision-model client wrapper and cost estimates"""
from decimal import Decimal
from types import SimpleNamespace

import httpx
import openai
import pytest

from hazardscan.core.exceptions import UpstreamAuthFailure, UpstreamUnavailable
from hazardscan.services.analysis_service import (
    HazardAnalyzer,
    ModelResponse,
    estimate_cost,
    extract_text,
)


class FakeCompletions:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.result


def fake_client(completions: FakeCompletions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def completion(content, prompt_tokens=900, completion_tokens=300):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        ),
    )


REQUEST = httpx.Request("POST", "https://api.openai.test/v1/chat/completions")


class TestEstimateCost:

    def test_cost_from_token_counts(self):
        response = ModelResponse(text="", prompt_tokens=1000, completion_tokens=500, total_tokens=1500)
        assert estimate_cost(response, 0.0025, 0.01) == Decimal("0.007500")

    def test_unknown_usage_has_no_cost(self):
        assert estimate_cost(ModelResponse(text=""), 0.0025, 0.01) is None


class TestExtractText:

    def test_string_content(self):
        assert extract_text(SimpleNamespace(content='{"a": 1}')) == '{"a": 1}'

    def test_part_list_content(self):
        message = SimpleNamespace(content=[
            {"type": "text", "text": '{"a":'},
            {"type": "image_url", "image_url": {"url": "x"}},
            SimpleNamespace(type="text", text=" 1}"),
        ])
        assert extract_text(message) == '{"a": 1}'

    def test_missing_content(self):
        assert extract_text(SimpleNamespace(content=None)) == ""


@pytest.mark.asyncio
class TestHazardAnalyzer:

    async def test_request_shape_and_usage(self):
        completions = FakeCompletions(result=completion('{"hazards": []}'))
        analyzer = HazardAnalyzer(fake_client(completions), model="gpt-4o")

        response = await analyzer.analyze("https://blob.test/a.webp")

        assert response.text == '{"hazards": []}'
        assert (response.prompt_tokens, response.completion_tokens, response.total_tokens) == (900, 300, 1200)
        assert response.latency_ms >= 0

        kwargs = completions.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["temperature"] == 0
        assert kwargs["messages"][0]["role"] == "system"
        user_parts = kwargs["messages"][1]["content"]
        assert user_parts[1] == {"type": "image_url", "image_url": {"url": "https://blob.test/a.webp"}}

    async def test_missing_usage(self):
        result = completion("{}")
        result.usage = None
        response = await HazardAnalyzer(fake_client(FakeCompletions(result=result))).analyze("https://x.test/a.png")
        assert response.total_tokens is None

    async def test_auth_failure(self):
        error = openai.AuthenticationError(
            "bad key", response=httpx.Response(401, request=REQUEST), body=None
        )
        analyzer = HazardAnalyzer(fake_client(FakeCompletions(error=error)))

        with pytest.raises(UpstreamAuthFailure) as exc_info:
            await analyzer.analyze("https://x.test/a.png")
        assert exc_info.value.code == "upstream_auth_failed"

    async def test_connection_failure(self):
        analyzer = HazardAnalyzer(fake_client(FakeCompletions(error=openai.APIConnectionError(request=REQUEST))))

        with pytest.raises(UpstreamUnavailable):
            await analyzer.analyze("https://x.test/a.png")

    async def test_server_error(self):
        error = openai.InternalServerError(
            "boom", response=httpx.Response(500, request=REQUEST), body=None
        )
        analyzer = HazardAnalyzer(fake_client(FakeCompletions(error=error)))

        with pytest.raises(UpstreamUnavailable):
            await analyzer.analyze("https://x.test/a.png")
