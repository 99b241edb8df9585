FLASHCARD_PROMPT_TEMPLATE = """You are a flashcard generator for language learning.

CRITICAL RULES - LANGUAGE DETECTION:
1. Detect the language of the input text
2. If text is in {target_language_upper} -> generate both front and back in {target_language_upper}
3. If text is in ENGLISH or any other foreign language:
   - front: MUST be in the ORIGINAL language of the text
   - back: MUST be in {target_language_upper} (translation/explanation)

Generate 5-8 flashcards. For foreign language texts, prioritize:
- Key vocabulary and phrases (in original language)
- Important concepts with context
- Idioms and expressions
- Difficult terms worth memorizing

Return ONLY a valid JSON array, no comments:
[
  {{
    "front": "term/phrase in original language",
    "back": "{target_language} translation/explanation"
  }}
]

TEXT TO ANALYZE:
{source_text}

JSON response:"""


def build_flashcard_prompt(source_text: str, target_language: str) -> str:
    return FLASHCARD_PROMPT_TEMPLATE.format(
        source_text=source_text,
        target_language=target_language,
        target_language_upper=target_language.upper(),
    )
