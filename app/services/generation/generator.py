from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import httpx

from app.core.config import Settings
from app.schemas.generations import FlashcardProposal
from app.services.generation.errors import (
    AIConfigurationError,
    AIEmptyResponseError,
    AIServiceError,
)
from app.services.generation.prompts import build_flashcard_prompt
from app.services.generation.proposal_parser import parse_proposals

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = (
    "The AI model is temporarily overloaded. Try again in 5-10 minutes "
    "or add your own API key at https://openrouter.ai/settings/integrations"
)


@dataclass(frozen=True)
class GeneratorConfig:
    """Everything the generator needs to reach the completion service."""

    api_key: Optional[str]
    model: str
    api_url: str
    temperature: float = 0.7
    max_tokens: int = 2000
    timeout_seconds: float = 60.0
    target_language: str = "Polish"
    app_url: Optional[str] = None
    app_title: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeneratorConfig":
        return cls(
            api_key=settings.OPENROUTER_API_KEY,
            model=settings.AI_MODEL,
            api_url=settings.AI_API_URL,
            temperature=settings.AI_TEMPERATURE,
            max_tokens=settings.AI_MAX_TOKENS,
            timeout_seconds=settings.AI_TIMEOUT_SECONDS,
            target_language=settings.AI_TARGET_LANGUAGE,
            app_url=settings.APP_URL,
            app_title=settings.APP_TITLE,
        )


class ProposalGenerator:
    """Request flashcard proposals from an OpenAI-compatible chat completion API.

    One request per call, no retries. Failures raise a ``GenerationError``
    subclass.
    """

    def __init__(self, config: GeneratorConfig, http_client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._http_client = http_client

    @property
    def model(self) -> str:
        return self.config.model

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.api_key}",
        }
        if self.config.app_url:
            headers["HTTP-Referer"] = self.config.app_url
        if self.config.app_title:
            headers["X-Title"] = self.config.app_title
        return headers

    def _payload(self, source_text: str) -> dict[str, Any]:
        prompt = build_flashcard_prompt(source_text, self.config.target_language)
        return {
            "model": self.config.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }

    async def _post(self, source_text: str) -> httpx.Response:
        kwargs = {"json": self._payload(source_text), "headers": self._headers()}
        try:
            if self._http_client is not None:
                return await self._http_client.post(
                    self.config.api_url, timeout=self.config.timeout_seconds, **kwargs
                )
            async with httpx.AsyncClient(timeout=self.config.timeout_seconds) as client:
                return await client.post(self.config.api_url, **kwargs)
        except httpx.TimeoutException as exc:
            logger.error("AI service request timed out: %s", exc)
            raise AIServiceError(
                "The AI service did not respond in time. Please try again.",
                code="AI_TIMEOUT",
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("AI service request failed: %s", exc)
            raise AIServiceError(
                "The AI service is unreachable. Please try again later.",
                code="AI_UNAVAILABLE",
            ) from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return

        detail = ""
        try:
            body = response.json()
            if isinstance(body, dict) and isinstance(body.get("error"), dict):
                detail = str(body["error"].get("message") or "")
        except ValueError:
            pass
        logger.error("AI service returned %s: %s", response.status_code, detail or response.text[:200])

        if response.status_code == 429:
            raise AIServiceError(RATE_LIMIT_MESSAGE, code="AI_RATE_LIMITED", status_code=429)
        raise AIServiceError(
            f"AI service error: {response.status_code} {response.reason_phrase}. {detail}".strip(),
            status_code=response.status_code,
        )

    @staticmethod
    def _extract_content(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError as exc:
            raise AIEmptyResponseError("Invalid response from the AI service.") from exc

        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices or not isinstance(choices[0], dict):
            raise AIEmptyResponseError()
        message = choices[0].get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content.strip():
            raise AIEmptyResponseError()
        return content

    async def generate(self, source_text: str) -> List[FlashcardProposal]:
        """Return a non-empty list of ``ai-full`` proposals for ``source_text``."""
        if not self.config.api_key:
            raise AIConfigurationError()

        logger.info("Requesting flashcards from %s (%d chars)", self.config.model, len(source_text))
        response = await self._post(source_text)
        self._raise_for_status(response)
        content = self._extract_content(response)
        logger.debug("AI response preview: %s", content[:200])

        proposals = parse_proposals(content)
        logger.info("Parsed %d flashcard proposals", len(proposals))
        return proposals
