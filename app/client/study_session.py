"""Flip-card study run over the user's saved flashcards.

Cards are shuffled once per run and shown one at a time. The answer side is
revealed with ``flip`` and the user grades themselves; there is no scheduling
between runs.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, List, MutableSequence, Optional

from app.client.api_client import FlashcardsApiClient
from app.schemas.flashcards import FlashcardOut

logger = logging.getLogger(__name__)

NO_FLASHCARDS_MESSAGE = (
    'You have no flashcards yet. Add some under "My collection" or "Generate".'
)

Shuffle = Callable[[MutableSequence[FlashcardOut]], None]


class StudySessionError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class StudySummary:
    correct: int
    incorrect: int

    @property
    def total(self) -> int:
        return self.correct + self.incorrect

    @property
    def percentage(self) -> int:
        if not self.total:
            return 0
        return round(self.correct / self.total * 100)


class StudySession:
    def __init__(self, api_client: FlashcardsApiClient, shuffle: Shuffle = random.shuffle):
        self.api_client = api_client
        self._shuffle = shuffle
        self.cards: List[FlashcardOut] = []
        self.index = 0
        self.show_back = False
        self.correct = 0
        self.incorrect = 0
        self.completed = False

    async def load(self) -> None:
        """Fetch every card and start a fresh run.

        ``ApiError`` from the client propagates; an empty collection raises
        ``StudySessionError``.
        """
        cards = await self.api_client.list_flashcards()
        if not cards:
            self.cards = []
            raise StudySessionError(NO_FLASHCARDS_MESSAGE)
        self.cards = list(cards)
        self.restart()
        logger.info("Study session loaded with %d cards", len(self.cards))

    def restart(self) -> None:
        self._shuffle(self.cards)
        self.index = 0
        self.show_back = False
        self.correct = 0
        self.incorrect = 0
        self.completed = False

    @property
    def current(self) -> Optional[FlashcardOut]:
        if self.completed or not self.cards:
            return None
        return self.cards[self.index]

    @property
    def total(self) -> int:
        return len(self.cards)

    @property
    def position(self) -> int:
        """1-based number of the card on screen."""
        return self.index + 1 if self.cards else 0

    @property
    def progress(self) -> float:
        if not self.cards:
            return 0.0
        return self.position / self.total * 100

    def flip(self) -> None:
        if self.current is not None:
            self.show_back = not self.show_back

    def answer(self, was_correct: bool) -> None:
        """Grade the current card and advance; only allowed once the back is shown."""
        if self.current is None:
            raise StudySessionError("The study session is not running.")
        if not self.show_back:
            raise StudySessionError("Reveal the answer before grading the card.")

        if was_correct:
            self.correct += 1
        else:
            self.incorrect += 1

        if self.index < len(self.cards) - 1:
            self.index += 1
            self.show_back = False
        else:
            self.completed = True

    def summary(self) -> StudySummary:
        return StudySummary(correct=self.correct, incorrect=self.incorrect)
