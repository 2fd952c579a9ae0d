"""AI collaborator for project risk assessment.

Sends a compact feature summary of a project to the Gemini
``generateContent`` endpoint and parses the reply into a RiskAssessment.

The reply text is expected to be a JSON object, but models often wrap it
in a markdown code fence. ``parse_ai_reply`` strips such a fence and
returns either a ParsedReply or a ReplyParseError; it never guesses.
Every failure surfaces as AiAssessmentError so callers can fall back to
the heuristic.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from devclean.core.config import DEFAULT_AI_MODEL
from devclean.risk.models import MAX_SCORE, RiskAssessment, RiskSource
from devclean.scanner.models import ProjectMeta

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

PROMPT_INSTRUCTIONS: tuple[str, ...] = (
    "Return JSON only, no markdown.",
    "Use score 0-10, where 0 is safe to delete and 10 is critical.",
    "Return short reasons (3-5).",
    "Use className as Critical, Active, or Burner.",
)


class AiAssessmentError(Exception):
    """Raised when the AI collaborator cannot produce an assessment."""


class RiskAdvisor(Protocol):
    """Anything that can produce an AI assessment for a project."""

    def assess(self, meta: ProjectMeta) -> RiskAssessment: ...


class AiPayload(BaseModel):
    """Structured body of an AI reply."""

    model_config = ConfigDict(extra="ignore")

    score: int = Field(ge=0)
    reasons: list[str]
    class_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("className", "class_name"),
    )


@dataclass(frozen=True, slots=True)
class ParsedReply:
    """Successful parse of an AI reply."""

    assessment: RiskAssessment


@dataclass(frozen=True, slots=True)
class ReplyParseError:
    """Failed parse of an AI reply.

    Attributes:
        message: What went wrong.
        raw: The reply text that failed to parse.
    """

    message: str
    raw: str


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence, if present.

    Handles ```json, ```JSON and bare ``` fences. Text without a leading
    fence is returned trimmed but otherwise unchanged.
    """
    trimmed = text.strip()
    if not trimmed.startswith("```"):
        return trimmed
    body = trimmed.lstrip("`")
    for lang in ("json", "JSON"):
        if body.startswith(lang):
            body = body[len(lang) :]
            break
    return body.strip().rstrip("`").strip()


def parse_ai_reply(text: str) -> ParsedReply | ReplyParseError:
    """Parse AI reply text into an assessment.

    The score is capped at 10 and the class is always recomputed from the
    score; a class label in the reply is advisory only.

    Args:
        text: Raw reply text, optionally fenced.

    Returns:
        ParsedReply on success, ReplyParseError otherwise.
    """
    cleaned = strip_code_fence(text)
    try:
        payload = AiPayload.model_validate_json(cleaned)
    except ValidationError as e:
        return ReplyParseError(message=f"AI JSON parse failed: {e}", raw=text)

    score = min(payload.score, MAX_SCORE)
    assessment = RiskAssessment.from_score(score, payload.reasons, RiskSource.AI)
    if payload.class_name and payload.class_name != assessment.class_name.value:
        logger.debug(
            "AI label %s disagrees with score %d, using %s",
            payload.class_name,
            score,
            assessment.class_name.value,
        )
    return ParsedReply(assessment=assessment)


def build_prompt(meta: ProjectMeta) -> dict[str, Any]:
    """Build the structured prompt describing a project."""
    return {
        "task": "Assess project deletion risk for a developer storage cleanup tool.",
        "instructions": list(PROMPT_INSTRUCTIONS),
        "project": {
            "name": meta.name,
            "path": meta.path,
            "dependencyCount": meta.dependency_count,
            "hasGit": meta.has_git,
            "hasEnvFile": meta.has_env_file,
            "hasStartupKeyword": meta.has_startup_keyword,
            "lastModifiedDays": meta.last_modified_days,
            "sizeBytes": meta.size_bytes,
        },
    }


def build_request_body(meta: ProjectMeta) -> dict[str, Any]:
    """Build the generateContent request body for a project."""
    return {
        "contents": [
            {
                "role": "user",
                "parts": [{"text": json.dumps(build_prompt(meta))}],
            }
        ],
        "generationConfig": {
            "temperature": 0.2,
            "maxOutputTokens": 220,
        },
    }


def extract_reply_text(data: object) -> str | None:
    """Return the text of the last part of the last candidate, if any."""
    if not isinstance(data, dict):
        return None
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    content = candidates[-1].get("content") if isinstance(candidates[-1], dict) else None
    if not isinstance(content, dict):
        return None
    parts = content.get("parts")
    if not isinstance(parts, list) or not parts or not isinstance(parts[-1], dict):
        return None
    text = parts[-1].get("text")
    return text if isinstance(text, str) else None


class GeminiClient:
    """HTTP client for Gemini risk assessments.

    Args:
        api_key: Gemini API key.
        model: Model name.
        timeout: Request timeout in seconds.
        base_url: API base URL.
        transport: Optional httpx transport (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_AI_MODEL,
        timeout: float = 30.0,
        base_url: str = GEMINI_BASE_URL,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.model = model
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(timeout=timeout, transport=transport)

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/models/{self.model}:generateContent"

    def assess(self, meta: ProjectMeta) -> RiskAssessment:
        """Request an AI assessment for one project.

        Raises:
            AiAssessmentError: On transport errors, non-success status,
                missing reply text, or an unparsable reply.
        """
        try:
            response = self._client.post(
                self.endpoint,
                params={"key": self._api_key},
                json=build_request_body(meta),
            )
        except httpx.HTTPError as e:
            raise AiAssessmentError(f"AI request failed: {e}") from e

        if not response.is_success:
            raise AiAssessmentError(f"AI request failed with status {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise AiAssessmentError(f"AI response parse failed: {e}") from e

        text = extract_reply_text(data)
        if text is None:
            raise AiAssessmentError("AI response missing text")

        result = parse_ai_reply(text)
        if isinstance(result, ReplyParseError):
            raise AiAssessmentError(result.message)
        return result.assessment

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> GeminiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
