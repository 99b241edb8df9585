"""In-memory review state for one generation session.

Nothing here talks to the network; proposals only reach storage through
``BulkSaveCommitter``.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Dict, List, Optional

from app.core.limits import BACK_MAX_LENGTH, FRONT_MAX_LENGTH
from app.schemas.generations import GenerationCreateResponse
from app.utils.enums import FlashcardSource


class InvalidEditError(ValueError):
    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(errors.values()))


def validate_edit(front: str, back: str) -> Dict[str, str]:
    """Return field -> message for every violated bound (empty when valid)."""
    errors: Dict[str, str] = {}
    front_len = len((front or "").strip())
    back_len = len((back or "").strip())
    if front_len == 0:
        errors["front"] = "Front cannot be empty"
    elif front_len > FRONT_MAX_LENGTH:
        errors["front"] = f"Front can have at most {FRONT_MAX_LENGTH} characters"
    if back_len == 0:
        errors["back"] = "Back cannot be empty"
    elif back_len > BACK_MAX_LENGTH:
        errors["back"] = f"Back can have at most {BACK_MAX_LENGTH} characters"
    return errors


@dataclass
class ProposalViewState:
    client_id: str
    front: str
    back: str
    source: FlashcardSource = FlashcardSource.ai_full
    accepted: bool = False
    edited: bool = False


class ReviewSession:
    def __init__(self):
        self.items: List[ProposalViewState] = []
        self.source_text: str = ""
        self.generation_id: Optional[int] = None

    def load(self, response: GenerationCreateResponse, source_text: str = "") -> None:
        """Replace the session with fresh, unaccepted proposals."""
        stamp = int(time.time() * 1000)
        self.items = [
            ProposalViewState(
                client_id=f"proposal-{stamp}-{index}",
                front=proposal.front,
                back=proposal.back,
                source=proposal.source,
            )
            for index, proposal in enumerate(response.flashcards_proposals)
        ]
        self.generation_id = response.generation_id
        self.source_text = source_text

    def get(self, client_id: str) -> Optional[ProposalViewState]:
        return next((item for item in self.items if item.client_id == client_id), None)

    def toggle_accept(self, client_id: str) -> None:
        item = self.get(client_id)
        if item is not None:
            item.accepted = not item.accepted

    def edit(self, client_id: str, front: str, back: str) -> None:
        errors = validate_edit(front, back)
        if errors:
            raise InvalidEditError(errors)
        item = self.get(client_id)
        if item is None:
            return
        item.front = front
        item.back = back
        item.edited = True
        item.source = FlashcardSource.ai_edited

    def reject(self, client_id: str) -> None:
        self.items = [item for item in self.items if item.client_id != client_id]

    def reset(self) -> None:
        self.items = []
        self.source_text = ""
        self.generation_id = None

    def accepted(self) -> List[ProposalViewState]:
        return [item for item in self.items if item.accepted]

    @property
    def total_count(self) -> int:
        return len(self.items)

    @property
    def accepted_count(self) -> int:
        return sum(1 for item in self.items if item.accepted)
