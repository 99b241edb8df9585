# app/models/__init__.py

from .user import User
from .generation import Generation
from .generation_error_log import GenerationErrorLog
from .flashcard import Flashcard

__all__ = [
    "User",
    "Generation",
    "GenerationErrorLog",
    "Flashcard",
]
