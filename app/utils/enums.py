import enum


class FlashcardSource(str, enum.Enum):
    ai_full = "ai-full"      # unedited AI output
    ai_edited = "ai-edited"  # AI output altered by the user
    manual = "manual"


AI_SOURCES = frozenset({FlashcardSource.ai_full, FlashcardSource.ai_edited})
