import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from app.models.generation import Generation
from app.models.generation_error_log import GenerationErrorLog
from app.services.generation.errors import AIFormatError, GenerationPersistenceError
from app.services.generation.generation_service import GenerationService, hash_source_text

pytestmark = pytest.mark.anyio


def test_hash_is_sha256_hex():
    digest = hash_source_text("abc")

    assert digest == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    assert len(digest) == 64


async def test_successful_generation_is_recorded(db_session, user, stub_generator, source_text):
    user_id = user.id
    service = GenerationService(db_session, stub_generator)

    result = await service.generate_flashcards(source_text, user_id)

    assert result.generated_count == 3
    assert len(result.flashcards_proposals) == 3
    assert stub_generator.calls == [source_text]

    generation = await db_session.get(Generation, result.generation_id)
    assert generation is not None
    assert generation.user_id == user_id
    assert generation.model == stub_generator.model
    assert generation.generated_count == 3
    assert generation.source_text_length == len(source_text)
    assert generation.source_text_hash == hash_source_text(source_text)
    assert generation.generation_duration >= 0


async def test_generator_failure_writes_error_log(db_session, user, stub_generator, source_text):
    user_id = user.id
    stub_generator.error = AIFormatError()
    service = GenerationService(db_session, stub_generator)

    with pytest.raises(AIFormatError):
        await service.generate_flashcards(source_text, user_id)

    logs = (await db_session.execute(select(GenerationErrorLog))).scalars().all()
    assert len(logs) == 1
    assert logs[0].user_id == user_id
    assert logs[0].error_code == "AI_NO_JSON_FOUND"
    assert logs[0].error_message == "No JSON found in the AI response."
    assert logs[0].model == stub_generator.model
    assert logs[0].source_text_length == len(source_text)

    generations = await db_session.scalar(select(func.count()).select_from(Generation))
    assert generations == 0


async def test_unexpected_failure_is_logged_as_unknown(db_session, user, stub_generator, source_text):
    user_id = user.id
    stub_generator.error = RuntimeError("boom")
    service = GenerationService(db_session, stub_generator)

    with pytest.raises(RuntimeError):
        await service.generate_flashcards(source_text, user_id)

    log = (await db_session.execute(select(GenerationErrorLog))).scalars().one()
    assert log.error_code == "UNKNOWN"
    assert log.error_message == "boom"


async def test_failed_generation_insert_raises_and_is_logged(
    db_session, user, stub_generator, source_text, monkeypatch
):
    user_id = user.id
    original_commit = db_session.commit
    calls = {"n": 0}

    async def flaky_commit():
        calls["n"] += 1
        if calls["n"] == 1:
            raise OperationalError("INSERT INTO generations", {}, Exception("database is locked"))
        await original_commit()

    monkeypatch.setattr(db_session, "commit", flaky_commit)
    service = GenerationService(db_session, stub_generator)

    with pytest.raises(GenerationPersistenceError):
        await service.generate_flashcards(source_text, user_id)

    generations = await db_session.scalar(select(func.count()).select_from(Generation))
    assert generations == 0
    log = (await db_session.execute(select(GenerationErrorLog))).scalars().one()
    assert log.error_code == "GENERATION_SAVE_FAILED"


async def test_error_log_failure_does_not_mask_original_error(
    db_session, user, stub_generator, source_text, monkeypatch
):
    user_id = user.id
    stub_generator.error = AIFormatError()

    async def broken_commit():
        raise OperationalError("INSERT INTO generation_error_logs", {}, Exception("disk full"))

    monkeypatch.setattr(db_session, "commit", broken_commit)
    service = GenerationService(db_session, stub_generator)

    with pytest.raises(AIFormatError):
        await service.generate_flashcards(source_text, user_id)
