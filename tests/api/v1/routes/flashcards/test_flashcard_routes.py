import pytest
from sqlalchemy import func, select

from app.models.flashcard import Flashcard
from app.models.generation import Generation
from app.utils.enums import FlashcardSource

pytestmark = pytest.mark.anyio


async def make_generation(db_session, user_id) -> int:
    generation = Generation(
        user_id=user_id,
        model="test/model",
        generated_count=3,
        source_text_hash="0" * 64,
        source_text_length=1500,
        generation_duration=120,
    )
    db_session.add(generation)
    await db_session.commit()
    return generation.id


async def count_flashcards(db_session) -> int:
    return await db_session.scalar(select(func.count()).select_from(Flashcard))


async def test_bulk_create_saves_all_cards(client, db_session, user):
    user_id = user.id
    generation_id = await make_generation(db_session, user_id)
    payload = {
        "flashcards": [
            {"front": "Q1", "back": "A1", "source": "ai-full", "generation_id": generation_id},
            {"front": " Q2 ", "back": "A2", "source": "ai-edited", "generation_id": generation_id},
        ]
    }

    resp = await client.post("/api/v1/flashcards", json=payload)

    assert resp.status_code == 201
    cards = resp.json()["flashcards"]
    assert [c["front"] for c in cards] == ["Q1", "Q2"]
    assert [c["source"] for c in cards] == ["ai-full", "ai-edited"]
    assert all(c["user_id"] == str(user_id) for c in cards)
    assert all(c["generation_id"] == generation_id for c in cards)
    assert await count_flashcards(db_session) == 2


async def test_bulk_create_is_all_or_nothing(client, db_session, user):
    generation_id = await make_generation(db_session, user.id)
    payload = {
        "flashcards": [
            {"front": "Q1", "back": "A1", "source": "ai-full", "generation_id": generation_id},
            {"front": "x" * 201, "back": "A2", "source": "ai-full", "generation_id": generation_id},
        ]
    }

    resp = await client.post("/api/v1/flashcards", json=payload)

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid input data"
    assert await count_flashcards(db_session) == 0


async def test_bulk_create_rejects_foreign_generation(client, db_session, other_user):
    foreign_generation = await make_generation(db_session, other_user.id)
    payload = {
        "flashcards": [
            {"front": "Q", "back": "A", "source": "ai-full", "generation_id": foreign_generation},
        ]
    }

    resp = await client.post("/api/v1/flashcards", json=payload)

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Generation not found"
    assert body["details"][0]["field"] == "generation_id"
    assert await count_flashcards(db_session) == 0


@pytest.mark.parametrize(
    "item",
    [
        {"front": "Q", "back": "A", "source": "ai-full"},
        {"front": "Q", "back": "A", "source": "manual", "generation_id": 1},
        {"front": "Q", "back": "A", "source": "robot", "generation_id": 1},
        {"front": "", "back": "A", "source": "ai-full", "generation_id": 1},
        {"front": "Q", "back": "y" * 501, "source": "ai-full", "generation_id": 1},
    ],
)
async def test_bulk_create_validates_items(client, db_session, item):
    resp = await client.post("/api/v1/flashcards", json={"flashcards": [item]})

    assert resp.status_code == 400
    assert await count_flashcards(db_session) == 0


async def test_bulk_create_rejects_empty_batch(client):
    resp = await client.post("/api/v1/flashcards", json={"flashcards": []})

    assert resp.status_code == 400


async def test_list_returns_only_own_cards_newest_first(client, db_session, user, other_user):
    user_id, other_id = user.id, other_user.id
    db_session.add_all(
        [
            Flashcard(user_id=user_id, front="older", back="b", source=FlashcardSource.manual),
            Flashcard(user_id=other_id, front="theirs", back="b", source=FlashcardSource.manual),
        ]
    )
    await db_session.commit()
    db_session.add(Flashcard(user_id=user_id, front="newer", back="b", source=FlashcardSource.manual))
    await db_session.commit()

    resp = await client.get("/api/v1/flashcards")

    assert resp.status_code == 200
    assert [c["front"] for c in resp.json()["flashcards"]] == ["newer", "older"]


async def test_manual_create(client):
    resp = await client.post("/api/v1/flashcards/manual", json={"front": "Term", "back": "Definition"})

    assert resp.status_code == 201
    card = resp.json()["flashcard"]
    assert card["source"] == "manual"
    assert card["generation_id"] is None


async def test_update_marks_ai_card_as_edited(client, db_session, user):
    user_id = user.id
    generation_id = await make_generation(db_session, user_id)
    card = Flashcard(user_id=user_id, front="Q", back="A", source=FlashcardSource.ai_full, generation_id=generation_id)
    db_session.add(card)
    await db_session.commit()

    resp = await client.put(f"/api/v1/flashcards/{card.id}", json={"front": "Q!", "back": "A!"})

    assert resp.status_code == 200
    updated = resp.json()["flashcard"]
    assert (updated["front"], updated["back"]) == ("Q!", "A!")
    assert updated["source"] == "ai-edited"


async def test_cannot_touch_someone_elses_card(client, db_session, other_user):
    card = Flashcard(user_id=other_user.id, front="Q", back="A", source=FlashcardSource.manual)
    db_session.add(card)
    await db_session.commit()
    card_id = card.id

    put = await client.put(f"/api/v1/flashcards/{card_id}", json={"front": "mine", "back": "now"})
    delete = await client.delete(f"/api/v1/flashcards/{card_id}")

    assert put.status_code == 404
    assert delete.status_code == 404
    assert delete.json() == {"error": "Flashcard not found"}
    assert await count_flashcards(db_session) == 1


async def test_delete_own_card(client, db_session, user):
    card = Flashcard(user_id=user.id, front="Q", back="A", source=FlashcardSource.manual)
    db_session.add(card)
    await db_session.commit()

    resp = await client.delete(f"/api/v1/flashcards/{card.id}")

    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert await count_flashcards(db_session) == 0


async def test_flashcards_require_authentication(anon_client):
    resp = await anon_client.get("/api/v1/flashcards")

    assert resp.status_code == 401
    assert resp.headers["WWW-Authenticate"] == "Bearer"
