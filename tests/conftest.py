from __future__ import annotations

from typing import AsyncGenerator, List, Optional

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from app.api.v1.routes.auth.auth import get_current_user
from app.api.v1.routes.generations.generations import get_proposal_generator
from app.api.v1.routes.router import router as api_router
from app.db.deps import Base, enable_sqlite_foreign_keys, get_db
from app.main import register_exception_handlers
from app.models.user import User
from app.schemas.generations import FlashcardProposal


VALID_SOURCE_TEXT = "Photosynthesis converts light energy into chemical energy. " * 25


class StubGenerator:
    """Stands in for ProposalGenerator so no HTTP call is made."""

    model = "test/stub-model"

    def __init__(self, proposals: Optional[List[FlashcardProposal]] = None, error: Optional[Exception] = None):
        self.proposals = proposals if proposals is not None else [
            FlashcardProposal(front="What is photosynthesis?", back="Turning light into chemical energy"),
            FlashcardProposal(front="Chlorophyll", back="Green pigment absorbing light"),
            FlashcardProposal(front="Stomata", back="Leaf pores for gas exchange"),
        ]
        self.error = error
        self.calls: List[str] = []

    async def generate(self, source_text: str) -> List[FlashcardProposal]:
        self.calls.append(source_text)
        if self.error is not None:
            raise self.error
        return list(self.proposals)


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Ensure pytest-anyio uses asyncio for all async tests."""
    return "asyncio"


@pytest.fixture()
def test_app() -> FastAPI:
    app = FastAPI()
    app.include_router(api_router, prefix="/api/v1")
    register_exception_handlers(app)
    return app


@pytest.fixture()
async def db_session(anyio_backend, tmp_path) -> AsyncGenerator[AsyncSession, None]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.sqlite'}", future=True)
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with async_session() as session:
            yield session
    finally:
        await engine.dispose()


async def _make_user(session: AsyncSession, email: str) -> User:
    user = User(email=email, password_hash="hashed", is_active=True)
    session.add(user)
    await session.commit()
    return user


@pytest.fixture()
async def user(anyio_backend, db_session: AsyncSession) -> User:
    return await _make_user(db_session, "learner@example.com")


@pytest.fixture()
async def other_user(anyio_backend, db_session: AsyncSession) -> User:
    return await _make_user(db_session, "someone-else@example.com")


@pytest.fixture()
def stub_generator() -> StubGenerator:
    return StubGenerator()


@pytest.fixture()
async def anon_client(
    anyio_backend, test_app: FastAPI, db_session: AsyncSession, stub_generator: StubGenerator
) -> AsyncGenerator[AsyncClient, None]:
    """Client without an authenticated user override."""
    async def _get_test_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    test_app.dependency_overrides[get_db] = _get_test_db
    test_app.dependency_overrides[get_proposal_generator] = lambda: stub_generator

    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client

    test_app.dependency_overrides.clear()


@pytest.fixture()
async def client(anyio_backend, test_app: FastAPI, anon_client: AsyncClient, user: User) -> AsyncClient:
    """Client authenticated as ``user``."""
    test_app.dependency_overrides[get_current_user] = lambda: user
    return anon_client


@pytest.fixture()
def source_text() -> str:
    return VALID_SOURCE_TEXT
