"""Turn a free-text model reply into flashcard proposals.

Models do not reliably return a single clean JSON document. A reply may hold
one array, several arrays emitted back to back (``[ {...} ] [ {...} ]``), or an
array wrapped in markdown fences and commentary. The scanner below finds every
top-level bracket-balanced ``[...]`` span that contains an object, parses each
one on its own and concatenates whatever parses.
"""
from __future__ import annotations

import json
import logging
from typing import Any, List, Tuple

from app.schemas.generations import FlashcardProposal
from app.services.generation.errors import AIEmptyResultError, AIFormatError
from app.utils.enums import FlashcardSource

logger = logging.getLogger(__name__)

Span = Tuple[int, int]


def _find_array_spans(text: str, start: int = 0, end: int | None = None) -> List[Span]:
    """Return ``(start, end)`` spans of maximal balanced arrays in ``text[start:end]``.

    Brackets inside JSON string literals are ignored. When an opening bracket
    is never closed the scan resumes right after it, so a stray ``[`` in prose
    cannot hide a real array that follows.
    """
    end = len(text) if end is None else end
    spans: List[Span] = []
    pos = start

    while pos < end:
        depth = 0
        open_at = -1
        in_string = False
        escaped = False
        resume_at = end

        for i in range(pos, end):
            ch = text[i]
            if depth == 0:
                if ch == "[":
                    open_at = i
                    depth = 1
                continue
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
            elif ch == '"':
                in_string = True
            elif ch == "[":
                depth += 1
            elif ch == "]":
                depth -= 1
                if depth == 0:
                    spans.append((open_at, i + 1))

        if depth > 0:
            # unterminated array, rescan its interior
            resume_at = open_at + 1
        pos = resume_at

    return spans


def _contains_object(text: str, span: Span) -> bool:
    return "{" in text[span[0]:span[1]]


def extract_json_objects(text: str) -> List[Any]:
    """Collect the elements of every parsable array in ``text``.

    Raises ``AIFormatError`` when no candidate array exists or none of them
    parses. A fragment that fails to parse is skipped and its interior is
    searched for smaller arrays.
    """
    pending = [s for s in _find_array_spans(text) if _contains_object(text, s)]
    if not pending:
        raise AIFormatError()

    items: List[Any] = []
    parsed_any = False
    while pending:
        start, end = pending.pop(0)
        fragment = text[start:end]
        try:
            parsed = json.loads(fragment)
        except json.JSONDecodeError as exc:
            logger.warning("Skipping unparsable JSON fragment at offset %s: %s", start, exc)
            inner = [s for s in _find_array_spans(text, start + 1, end - 1) if _contains_object(text, s)]
            pending = inner + pending
            continue
        parsed_any = True
        items.extend(parsed)

    if not parsed_any:
        raise AIFormatError()
    return items


def parse_proposals(text: str) -> List[FlashcardProposal]:
    """Parse a model reply into trimmed ``ai-full`` proposals.

    Items without a non-empty string ``front`` and ``back`` are dropped. An
    empty result raises ``AIEmptyResultError``.
    """
    proposals: List[FlashcardProposal] = []
    for item in extract_json_objects(text):
        if not isinstance(item, dict):
            continue
        front = item.get("front")
        back = item.get("back")
        if not isinstance(front, str) or not isinstance(back, str):
            continue
        front, back = front.strip(), back.strip()
        if not front or not back:
            continue
        proposals.append(
            FlashcardProposal(front=front, back=back, source=FlashcardSource.ai_full)
        )

    if not proposals:
        raise AIEmptyResultError()
    return proposals
