"""Batch translation of subtitle entries through a Gemini client."""

import logging
from typing import Callable, Protocol

from .models import BatchOutput, SubtitleEntry, TranslatedEntry, TranslationContext
from .prompt import BatchPrompt, build_prompt

logger = logging.getLogger(__name__)

BATCH_SIZE = 25

ProgressCallback = Callable[[int, int], None]


class BatchTranslator(Protocol):
    def translate_batch(self, prompt: BatchPrompt, model: str) -> list[BatchOutput]: ...


def plan_batches(
    entries: list[SubtitleEntry], batch_size: int = BATCH_SIZE
) -> list[list[SubtitleEntry]]:
    """Split entries into contiguous batches of at most batch_size entries."""
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    return [entries[i : i + batch_size] for i in range(0, len(entries), batch_size)]


def failure_marker(entry_id: int) -> str:
    """Placeholder text for an entry the model left out of its response."""
    return f"!!TRANSLATION FAILED for id {entry_id}!!"


def is_failure_marker(text: str) -> bool:
    """Check whether a translation is the placeholder for a dropped entry."""
    return text.startswith("!!TRANSLATION FAILED for id ") and text.endswith("!!")


def reconcile(
    batch: list[SubtitleEntry], outputs: list[BatchOutput]
) -> list[TranslatedEntry]:
    """Merge API output onto the batch by id, keeping the batch's order.

    Ids the model dropped get a failure marker instead of aborting the batch.
    Extra or duplicate ids in the output are ignored after the first.
    """
    trans_by_id: dict[int, str] = {}
    for output in outputs:
        trans_by_id.setdefault(output.id, output.translation)

    result = []
    for entry in batch:
        translated_text = trans_by_id.get(entry.id)
        if translated_text is None:
            logger.warning("No translation returned for id %s", entry.id)
            translated_text = failure_marker(entry.id)
        result.append(
            TranslatedEntry(
                id=entry.id,
                start_time=entry.start_time,
                end_time=entry.end_time,
                text=entry.text,
                translated_text=translated_text,
            )
        )

    return result


def translate_entries(
    entries: list[SubtitleEntry],
    context: TranslationContext,
    client: BatchTranslator,
    on_progress: ProgressCallback | None = None,
    batch_size: int = BATCH_SIZE,
) -> list[TranslatedEntry]:
    """Translate a whole document one batch at a time.

    Any batch failure propagates immediately and nothing translated so far is
    returned. On success the result is sorted by id.

    Args:
        entries: Entries to translate, in display order
        context: Narrative context and languages for this pass
        client: Object sending one batch to the translation service
        on_progress: Called with (processed, total) after each batch
        batch_size: Maximum entries per request

    Returns:
        One TranslatedEntry per input entry, sorted by id
    """
    total = len(entries)
    batches = plan_batches(entries, batch_size)
    translated: list[TranslatedEntry] = []
    processed = 0

    logger.info(
        "Translating %d entries in %d batches (%s -> %s, %s)",
        total,
        len(batches),
        context.current_source_language,
        context.target_language,
        context.model,
    )

    for i, batch in enumerate(batches):
        logger.debug("Batch %d/%d: ids %s..%s", i + 1, len(batches), batch[0].id, batch[-1].id)
        prompt = build_prompt(batch, context)
        outputs = client.translate_batch(prompt, context.model)
        translated.extend(reconcile(batch, outputs))

        processed = min(processed + len(batch), total)
        if on_progress:
            on_progress(processed, total)

    return sorted(translated, key=lambda entry: entry.id)
