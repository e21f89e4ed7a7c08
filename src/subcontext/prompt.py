"""Prompt and response schema construction for batch translation."""

import json
from dataclasses import dataclass

from .models import BatchInput, SubtitleEntry, TranslationContext


SYSTEM_INSTRUCTION = """You are an expert subtitle translator with a deep understanding of literature, cinema, and storytelling. Your task is to translate subtitles from {source_lang} into {target_lang}.

**Crucial Constraints:**
1.  **Preserve Meaning & Nuance:** Do not perform a literal translation. Capture the original intent, emotion, subtext, and cultural nuances. The translation must sound natural and fluent in {target_lang}.
2.  **Respect Time Constraints:** For each subtitle entry, a "duration_seconds" is provided. This is the time the subtitle is on screen. Your translated text must be concise and easily readable within this duration.
3.  **Maintain Consistency:** Use the provided story context and character list to ensure consistency in tone, terminology, and character voices.
4.  **Pay Attention to Gender and Formality:** Accurately reflect character genders in the translation. Use appropriate levels of politeness, formality, and honorifics based on the characters' relationships and the cultural context of the {target_lang} language.

**Provided Context:**
*   **Story Synopsis:** {synopsis}
*   **Character List:** {characters}
"""

TASK_PROMPT = (
    "Translate the following subtitle entries. Respond with a JSON array where "
    "each object corresponds to an entry in the input array.\n\n{payload}"
)

RESPONSE_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "id": {
                "type": "NUMBER",
                "description": "The original ID of the subtitle entry.",
            },
            "translation": {
                "type": "STRING",
                "description": "The translated subtitle text, crafted for the target language and time duration.",
            },
        },
        "required": ["id", "translation"],
    },
}


@dataclass(frozen=True)
class BatchPrompt:
    """Everything the translation client needs to send for one batch."""

    system_instruction: str
    task_prompt: str
    response_schema: dict


def build_system_instruction(context: TranslationContext) -> str:
    """Render the translator instructions for the context's languages and story."""
    return SYSTEM_INSTRUCTION.format(
        source_lang=context.current_source_language,
        target_lang=context.target_language,
        synopsis=context.synopsis,
        characters=context.characters,
    )


def build_batch_input(batch: list[SubtitleEntry]) -> list[BatchInput]:
    """Wire records for a batch, with each entry's on-screen duration."""
    return [
        BatchInput(
            id=entry.id,
            original_text=entry.text,
            duration_seconds=entry.duration_seconds,
        )
        for entry in batch
    ]


def build_task_prompt(batch: list[SubtitleEntry]) -> str:
    """Render the batch as the JSON task payload."""
    payload = [item.model_dump() for item in build_batch_input(batch)]
    return TASK_PROMPT.format(payload=json.dumps(payload, ensure_ascii=False, indent=2))


def build_prompt(batch: list[SubtitleEntry], context: TranslationContext) -> BatchPrompt:
    """Build the instruction, task payload and output schema for one batch."""
    return BatchPrompt(
        system_instruction=build_system_instruction(context),
        task_prompt=build_task_prompt(batch),
        response_schema=RESPONSE_SCHEMA,
    )
