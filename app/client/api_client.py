"""Async HTTP client for the FlashGen API."""
from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

import httpx

from app.schemas.flashcards import FlashcardOut
from app.schemas.generations import GenerationCreateResponse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 90.0

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."
SERVER_ERROR_MESSAGE = "Server error. Please try again later."
VALIDATION_ERROR_MESSAGE = "Data validation failed."
DELETE_CONFIRMATION_PROMPT = "Are you sure you want to delete this flashcard?"

ConfirmCallback = Callable[[str], bool]


class ApiError(Exception):
    """A failed API call, carrying a message suitable for display."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _error_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def server_message(response: httpx.Response) -> Optional[str]:
    body = _error_body(response)
    message = body.get("message") or body.get("error")
    return message if isinstance(message, str) and message else None


def server_details(response: httpx.Response) -> Optional[str]:
    details = _error_body(response).get("details")
    return details if isinstance(details, str) and details else None


class FlashcardsApiClient:
    """Thin wrapper over the ``/api/v1`` endpoints.

    ``http_client`` may be injected; otherwise one is created and owned by
    this instance (close it with ``aclose`` or use ``async with``).
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "FlashcardsApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def logout(self) -> None:
        """Forget the bearer token; tokens are stateless so there is nothing to revoke."""
        self.token = None

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def request(self, method: str, path: str, json: Any = None) -> httpx.Response:
        url = f"{self.base_url}/api/v1{path}"
        try:
            return await self._client.request(
                method, url, json=json, headers=self._headers(), timeout=self.timeout
            )
        except httpx.TimeoutException as exc:
            logger.error("%s %s timed out: %s", method, url, exc)
            raise ApiError("The request timed out. Please try again.") from exc
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise ApiError(UNEXPECTED_ERROR_MESSAGE) from exc

    async def generate(self, source_text: str) -> GenerationCreateResponse:
        response = await self.request("POST", "/generations", json={"source_text": source_text})
        if response.is_success:
            return GenerationCreateResponse.model_validate(response.json())

        status = response.status_code
        if status == 400:
            raise ApiError(server_message(response) or VALIDATION_ERROR_MESSAGE, status)
        if status == 401:
            raise ApiError("You must be logged in to generate flashcards.", status)
        if status == 500:
            # details carries the upstream reason, e.g. the rate-limit hint
            raise ApiError(server_details(response) or SERVER_ERROR_MESSAGE, status)
        raise ApiError(UNEXPECTED_ERROR_MESSAGE, status)

    async def save_flashcards(self, flashcards: List[dict[str, Any]]) -> httpx.Response:
        """POST a batch; status handling is left to the caller."""
        return await self.request("POST", "/flashcards", json={"flashcards": flashcards})

    def _raise_for_crud(self, response: httpx.Response, fallback: str) -> None:
        if response.is_success:
            return
        if response.status_code == 401:
            raise ApiError("You must be logged in.", 401)
        raise ApiError(server_message(response) or fallback, response.status_code)

    async def list_flashcards(self) -> List[FlashcardOut]:
        response = await self.request("GET", "/flashcards")
        self._raise_for_crud(response, "Failed to fetch flashcards")
        return [FlashcardOut.model_validate(row) for row in response.json()["flashcards"]]

    async def create_flashcard(self, front: str, back: str) -> FlashcardOut:
        response = await self.request("POST", "/flashcards/manual", json={"front": front, "back": back})
        self._raise_for_crud(response, "Failed to create flashcard")
        return FlashcardOut.model_validate(response.json()["flashcard"])

    async def update_flashcard(self, flashcard_id: int, front: str, back: str) -> FlashcardOut:
        response = await self.request("PUT", f"/flashcards/{flashcard_id}", json={"front": front, "back": back})
        self._raise_for_crud(response, "Failed to update flashcard")
        return FlashcardOut.model_validate(response.json()["flashcard"])

    async def delete_flashcard(self, flashcard_id: int, confirm: ConfirmCallback) -> bool:
        """Delete after ``confirm`` approves; returns False when declined."""
        if not confirm(DELETE_CONFIRMATION_PROMPT):
            return False
        response = await self.request("DELETE", f"/flashcards/{flashcard_id}")
        self._raise_for_crud(response, "Failed to delete flashcard")
        return True
