"""Unit tests for the AI collaborator.

Tests for reply parsing and the Gemini HTTP client using
httpx.MockTransport.
"""

import json

import httpx
import pytest
from devclean.risk.ai import (
    GEMINI_BASE_URL,
    AiAssessmentError,
    GeminiClient,
    ParsedReply,
    ReplyParseError,
    build_prompt,
    build_request_body,
    extract_reply_text,
    parse_ai_reply,
    strip_code_fence,
)
from devclean.risk.models import RiskClass, RiskSource
from devclean.scanner.models import ProjectMeta

META = ProjectMeta(
    id="/code/shop",
    path="/code/shop",
    name="shop",
    manifest_path="/code/shop/package.json",
    dependency_count=12,
    has_git=True,
    last_modified_days=3,
    size_bytes=4096,
)


def _gemini_reply(text: str) -> dict[str, object]:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class TestStripCodeFence:
    """Tests for strip_code_fence function."""

    @pytest.mark.parametrize(
        "text",
        [
            '{"score": 1}',
            '```json\n{"score": 1}\n```',
            '```JSON\n{"score": 1}\n```',
            '```\n{"score": 1}\n```',
            '  \n```json{"score": 1}```  ',
        ],
    )
    def test_fences_removed(self, text: str) -> None:
        """Fenced and unfenced replies reduce to the bare JSON."""
        assert strip_code_fence(text) == '{"score": 1}'


class TestParseAiReply:
    """Tests for parse_ai_reply function."""

    def test_valid_reply(self) -> None:
        """A valid reply parses into an AI assessment."""
        result = parse_ai_reply('{"score": 8, "reasons": ["a", "b"], "className": "Critical"}')

        assert isinstance(result, ParsedReply)
        assert result.assessment.score == 8
        assert result.assessment.class_name == RiskClass.CRITICAL
        assert result.assessment.reasons == ("a", "b")
        assert result.assessment.source == RiskSource.AI

    def test_score_capped_and_class_recomputed(self) -> None:
        """Scores above 10 are capped; the reply's label is not trusted."""
        result = parse_ai_reply('```json\n{"score": 14, "reasons": [], "className": "Burner"}\n```')

        assert isinstance(result, ParsedReply)
        assert result.assessment.score == 10
        assert result.assessment.class_name == RiskClass.CRITICAL

    def test_class_name_optional(self) -> None:
        """The class label may be omitted."""
        result = parse_ai_reply('{"score": 2, "reasons": ["old"]}')

        assert isinstance(result, ParsedReply)
        assert result.assessment.class_name == RiskClass.BURNER

    @pytest.mark.parametrize(
        "text",
        [
            "not json at all",
            '{"reasons": ["missing score"]}',
            '{"score": -1, "reasons": []}',
            '{"score": "high", "reasons": []}',
        ],
    )
    def test_invalid_replies(self, text: str) -> None:
        """Invalid replies produce a parse error carrying the raw text."""
        result = parse_ai_reply(text)

        assert isinstance(result, ReplyParseError)
        assert result.raw == text


class TestRequestBuilding:
    """Tests for prompt and request body construction."""

    def test_prompt_contains_project_summary(self) -> None:
        """The prompt carries the project feature summary."""
        prompt = build_prompt(META)

        assert prompt["project"] == {
            "name": "shop",
            "path": "/code/shop",
            "dependencyCount": 12,
            "hasGit": True,
            "hasEnvFile": False,
            "hasStartupKeyword": False,
            "lastModifiedDays": 3,
            "sizeBytes": 4096,
        }
        assert any("JSON only" in line for line in prompt["instructions"])

    def test_request_body(self) -> None:
        """The body wraps the JSON prompt with generation settings."""
        body = build_request_body(META)

        assert body["generationConfig"] == {"temperature": 0.2, "maxOutputTokens": 220}
        text = body["contents"][0]["parts"][0]["text"]
        assert json.loads(text) == build_prompt(META)

    def test_extract_reply_text_uses_last_part(self) -> None:
        """The last part of the last candidate is the reply."""
        data = {
            "candidates": [
                {"content": {"parts": [{"text": "first"}]}},
                {"content": {"parts": [{"text": "x"}, {"text": "last"}]}},
            ]
        }

        assert extract_reply_text(data) == "last"

    @pytest.mark.parametrize(
        "data",
        [None, {}, {"candidates": []}, {"candidates": [{"content": {"parts": []}}]}],
    )
    def test_extract_reply_text_missing(self, data: object) -> None:
        """Malformed responses yield no text."""
        assert extract_reply_text(data) is None


class TestGeminiClient:
    """Tests for GeminiClient against a mock transport."""

    def test_successful_assessment(self) -> None:
        """A successful response becomes an AI assessment."""
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                200,
                json=_gemini_reply('{"score": 7, "reasons": ["live app"], "className": "Active"}'),
            )

        with GeminiClient("k3y", model="m1", transport=httpx.MockTransport(handler)) as client:
            assessment = client.assess(META)

        assert assessment.score == 7
        assert assessment.source == RiskSource.AI
        assert len(requests) == 1
        request = requests[0]
        assert request.method == "POST"
        assert request.url.path == "/v1beta/models/m1:generateContent"
        assert request.url.params["key"] == "k3y"
        assert json.loads(request.content) == build_request_body(META)

    def test_endpoint(self) -> None:
        """The endpoint includes the model name."""
        client = GeminiClient("k", model="gemini-x")

        assert client.endpoint == f"{GEMINI_BASE_URL}/models/gemini-x:generateContent"
        client.close()

    def test_error_status(self) -> None:
        """Non-success statuses raise AiAssessmentError."""
        transport = httpx.MockTransport(lambda request: httpx.Response(429))

        with GeminiClient("k", transport=transport) as client:
            with pytest.raises(AiAssessmentError, match="429"):
                client.assess(META)

    def test_transport_error(self) -> None:
        """Transport failures raise AiAssessmentError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("boom", request=request)

        with GeminiClient("k", transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(AiAssessmentError, match="request failed"):
                client.assess(META)

    def test_invalid_json_body(self) -> None:
        """A non-JSON body raises AiAssessmentError."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))

        with GeminiClient("k", transport=transport) as client:
            with pytest.raises(AiAssessmentError, match="parse failed"):
                client.assess(META)

    def test_missing_text(self) -> None:
        """A response without reply text raises AiAssessmentError."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={}))

        with GeminiClient("k", transport=transport) as client:
            with pytest.raises(AiAssessmentError, match="missing text"):
                client.assess(META)

    def test_unparsable_reply(self) -> None:
        """An unparsable reply raises AiAssessmentError."""
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json=_gemini_reply("I think it is fine"))
        )

        with GeminiClient("k", transport=transport) as client:
            with pytest.raises(AiAssessmentError, match="AI JSON parse failed"):
                client.assess(META)
