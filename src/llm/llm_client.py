from __future__ import annotations

import copy
import json
import logging
import os
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Optional

import httpx
from pydantic import ValidationError

from llm.prompts import SUGGESTIONS_SYSTEM_PROMPT, SUGGESTIONS_USER_TEMPLATE, extraction_prompt
from llm.providers.base import LLMProvider, MalformedResponseError
from todo_app.models import BusinessInfo, Outcome, ParsedData, ValidationIssue

logger = logging.getLogger(__name__)

UNCONFIGURED_SUGGESTIONS = {
    "suggestions": [
        {
            "type": "general",
            "description": "OpenAI service not available. Please review the todo manually.",
            "action": "manual_review",
        }
    ],
    "reasoning": "OpenAI API not configured",
}

FALLBACK_SUGGESTIONS = {
    "suggestions": [
        {
            "type": "general",
            "description": "Please review the todo details and try again",
            "action": "modify_todo",
        }
    ],
    "reasoning": "Unable to generate specific suggestions",
}


class LLMServiceError(RuntimeError):
    """The language-model service could not be reached or answered with an HTTP error."""


@dataclass(frozen=True)
class Extraction:
    outcome: Outcome
    data: ParsedData


def extract_json_object(text: str) -> Optional[dict]:
    """Pull a JSON object out of chat text.

    Models like to wrap the object in prose or code fences, so we fall back to
    the outermost {...} span when the whole text is not valid JSON.
    """
    text = (text or "").strip()
    try:
        value = json.loads(text)
    except json.JSONDecodeError:
        start, end = text.find("{"), text.rfind("}")
        if start == -1 or end <= start:
            return None
        try:
            value = json.loads(text[start:end + 1])
        except json.JSONDecodeError:
            return None

    # valid JSON of another shape (array, string, number) is not an object
    return value if isinstance(value, dict) else None


class LLMClient:
    """Talks to a chat-completion provider to interpret todo text.

    A client without a provider is a valid, unconfigured client: it answers
    with default records instead of failing.
    """

    def __init__(
        self,
        provider: Optional[LLMProvider] = None,
        today: Callable[[], date] = date.today,
    ):
        self.provider = provider
        self._today = today

    @classmethod
    def from_env(cls) -> "LLMClient":
        name = os.getenv("LLM_PROVIDER", "openai").strip().lower()
        if name == "mock":
            from llm.providers.mock_provider import MockProvider

            return cls(provider=MockProvider())

        if not os.getenv("OPENAI_API_KEY", "").strip():
            logger.warning("OpenAI API key not provided. OpenAI features will be disabled.")
            return cls(provider=None)

        from llm.providers.openai_provider import OpenAIProvider

        return cls(provider=OpenAIProvider())

    @property
    def configured(self) -> bool:
        return self.provider is not None

    def complete(self, system: str, user: str, temperature: float = 0.2) -> str:
        if self.provider is None:
            raise LLMServiceError("No LLM provider configured")
        try:
            return self.provider.generate(system=system, user=user, temperature=temperature)
        except httpx.HTTPError as e:
            logger.error(f"LLM request failed: {e}")
            raise LLMServiceError(f"LLM request failed: {e}") from e

    def extract(self, text: str) -> Extraction:
        if self.provider is None:
            return Extraction(Outcome.UNCONFIGURED, ParsedData.default_for(text))

        try:
            raw = self.complete(extraction_prompt(self._today()), text, temperature=0.1)
        except MalformedResponseError as e:
            logger.warning(f"LLM returned an unusable completion: {e}")
            return Extraction(Outcome.CONTENT_ERROR, ParsedData.default_for(text))

        payload = extract_json_object(raw)
        if payload is None:
            logger.warning(f"Failed to parse LLM response as JSON: {raw[:200]!r}")
            return Extraction(Outcome.CONTENT_ERROR, ParsedData.default_for(text))

        try:
            return Extraction(Outcome.SUCCESS, ParsedData.model_validate(payload))
        except ValidationError as e:
            logger.warning(f"LLM response did not match the todo schema: {e}")
            return Extraction(Outcome.CONTENT_ERROR, ParsedData.default_for(text))

    def parse_todo_text(self, text: str) -> ParsedData:
        return self.extract(text).data

    def generate_suggestions(
        self,
        parsed: ParsedData,
        business_info: Optional[BusinessInfo],
        issues: list[ValidationIssue],
    ) -> dict[str, Any]:
        if self.provider is None:
            return copy.deepcopy(UNCONFIGURED_SUGGESTIONS)

        user = SUGGESTIONS_USER_TEMPLATE.format(
            parsed=parsed.model_dump_json(),
            business=business_info.model_dump_json() if business_info else "null",
            issues=json.dumps([issue.model_dump() for issue in issues]),
        )
        try:
            raw = self.complete(SUGGESTIONS_SYSTEM_PROMPT, user, temperature=0.3)
        except MalformedResponseError as e:
            logger.warning(f"LLM returned an unusable completion: {e}")
            return copy.deepcopy(FALLBACK_SUGGESTIONS)

        payload = extract_json_object(raw)
        if payload is None or not isinstance(payload.get("suggestions"), list):
            logger.warning("LLM suggestions were not in the expected shape, using fallback")
            return copy.deepcopy(FALLBACK_SUGGESTIONS)
        return payload
