import json

import httpx
import pytest

from app.client.api_client import FlashcardsApiClient
from app.client.bulk_save import BulkSaveCommitter, BulkSaveError, to_payload
from app.client.review_session import ProposalViewState
from app.utils.enums import FlashcardSource

pytestmark = pytest.mark.anyio


def saved_row(index: int, item: dict) -> dict:
    return {
        "id": index + 1,
        "user_id": "00000000-0000-0000-0000-000000000001",
        "front": item["front"],
        "back": item["back"],
        "source": item["source"],
        "generation_id": item["generation_id"],
        "created_at": "2026-01-01T00:00:00Z",
        "updated_at": "2026-01-01T00:00:00Z",
    }


class Recorder:
    def __init__(self, status_code: int = 201, body=None):
        self.status_code = status_code
        self.body = body
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code == 201:
            items = json.loads(request.content)["flashcards"]
            return httpx.Response(201, json={"flashcards": [saved_row(i, item) for i, item in enumerate(items)]})
        return httpx.Response(self.status_code, json=self.body or {})


def make_committer(recorder: Recorder) -> BulkSaveCommitter:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    return BulkSaveCommitter(FlashcardsApiClient("http://api.test", token="t", http_client=http_client))


def items(*pairs, source=FlashcardSource.ai_full):
    return [ProposalViewState(client_id=f"p-{i}", front=f, back=b, source=source) for i, (f, b) in enumerate(pairs)]


async def test_saves_batch_in_one_request():
    recorder = Recorder()
    committer = make_committer(recorder)
    batch = items(("Q1", "A1"), ("Q2", "A2"))
    batch[1].source = FlashcardSource.ai_edited

    result = await committer.save(batch, generation_id=12)

    assert result.count == 2
    assert len(recorder.requests) == 1
    request = recorder.requests[0]
    assert request.url.path == "/api/v1/flashcards"
    assert request.headers["Authorization"] == "Bearer t"
    body = json.loads(request.content)
    assert body == {
        "flashcards": [
            {"front": "Q1", "back": "A1", "source": "ai-full", "generation_id": 12},
            {"front": "Q2", "back": "A2", "source": "ai-edited", "generation_id": 12},
        ]
    }


async def test_payload_is_trimmed():
    payload = to_payload(ProposalViewState(client_id="p", front="  Q ", back=" A  "), 3)

    assert payload["front"] == "Q"
    assert payload["back"] == "A"


async def test_oversized_front_blocks_the_whole_batch():
    recorder = Recorder()
    committer = make_committer(recorder)

    with pytest.raises(BulkSaveError) as exc_info:
        await committer.save(items(("x" * 201, "A"), ("Q", "A")), generation_id=1)

    assert exc_info.value.invalid_count == 1
    assert "1 flashcard(s)" in exc_info.value.message
    assert recorder.requests == []


async def test_missing_generation_id_sends_nothing():
    recorder = Recorder()
    committer = make_committer(recorder)

    with pytest.raises(BulkSaveError) as exc_info:
        await committer.save(items(("Q", "A")), generation_id=None)

    assert "generation ID" in exc_info.value.message
    assert recorder.requests == []


async def test_empty_selection_sends_nothing():
    recorder = Recorder()
    committer = make_committer(recorder)

    with pytest.raises(BulkSaveError) as exc_info:
        await committer.save([], generation_id=4)

    assert exc_info.value.message == "No flashcards to save."
    assert recorder.requests == []


@pytest.mark.parametrize(
    "status_code, body, message",
    [
        (400, {"error": "Generation not found"}, "Generation not found"),
        (400, {}, "Data validation failed."),
        (401, {"error": "Unauthorized access. You must be logged in."}, "You must be logged in to save flashcards."),
        (500, {"error": "Error saving flashcards"}, "Server error. Please try again later."),
        (503, {}, "An unexpected error occurred."),
    ],
)
async def test_server_errors_are_mapped(status_code, body, message):
    committer = make_committer(Recorder(status_code=status_code, body=body))

    with pytest.raises(BulkSaveError) as exc_info:
        await committer.save(items(("Q", "A")), generation_id=2)

    assert exc_info.value.message == message
    assert exc_info.value.status_code == status_code
