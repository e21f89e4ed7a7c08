"""Translation session: the document, its context and the review state."""

import logging
from enum import Enum
from typing import Callable, Literal

from .config import Config
from .credentials import CredentialStore
from .errors import AuthOrQuotaError, CredentialMissing, ParseError
from .gemini import GeminiClient
from .languages import DEFAULT_MODEL
from .models import BatchOutput, SubtitleEntry, TranslatedEntry, TranslationContext
from .srt import format_srt, load_srt, translated_filename
from .translate import (
    BATCH_SIZE,
    ProgressCallback,
    is_failure_marker,
    reconcile,
    translate_entries,
)

logger = logging.getLogger(__name__)

AUTH_OR_QUOTA_MESSAGE = (
    "Your API key is invalid or has exceeded its quota. "
    "Please check your key or try again later."
)
TRANSLATE_FAILED_MESSAGE = (
    "Failed to translate subtitles. Please check your network connection and try again."
)
RETRANSLATE_FAILED_MESSAGE = "Re-translation failed. Please try again."
NO_CREDENTIAL_MESSAGE = "API key is not configured. Please set your API key first."

RetranslationSource = Literal["original", "edited"]


class SessionState(Enum):
    UPLOADING = "uploading"
    CONTEXT = "context"
    TRANSLATING = "translating"
    REVIEWING = "reviewing"


def user_message(error: Exception, retranslating: bool = False) -> str:
    """Single user-facing message for a failed translation pass."""
    if isinstance(error, CredentialMissing):
        return NO_CREDENTIAL_MESSAGE
    if isinstance(error, AuthOrQuotaError):
        return AUTH_OR_QUOTA_MESSAGE
    return RETRANSLATE_FAILED_MESSAGE if retranslating else TRANSLATE_FAILED_MESSAGE


class Session:
    """Owns one document from upload through review.

    Lifecycle: UPLOADING -> CONTEXT -> TRANSLATING -> REVIEWING. A failed
    initial pass returns to CONTEXT, a failed re-translation returns to
    REVIEWING with the previous translation untouched. Results of a pass are
    only committed once every batch has succeeded.
    """

    def __init__(
        self,
        config: Config,
        credentials: CredentialStore | None = None,
        client_factory: Callable[[str], GeminiClient] | None = None,
        on_progress: ProgressCallback | None = None,
        batch_size: int = BATCH_SIZE,
    ):
        self.config = config
        self.credentials = credentials or CredentialStore.from_config(config)
        self.client_factory = client_factory or self._default_client
        self.on_progress = on_progress
        self.batch_size = batch_size
        self.reset()

    def _default_client(self, api_key: str) -> GeminiClient:
        """Gemini client built from the session's config."""
        return GeminiClient(
            api_key,
            base_url=self.config.gemini_base_url,
            timeout=self.config.timeout,
        )

    def reset(self) -> None:
        """Drop the document and start over from the upload step."""
        self.state = SessionState.UPLOADING
        self.file_name = ""
        self.file_entries: list[SubtitleEntry] = []
        self.source_entries: list[SubtitleEntry] = []
        self.translated: list[TranslatedEntry] = []
        self.context: TranslationContext | None = None
        self.progress: tuple[int, int] | None = None
        self.error: str | None = None

    def load(self, content: str, file_name: str) -> list[SubtitleEntry]:
        """Parse an uploaded file and move on to the context step.

        A successful load replaces the previous document, its translation and
        its context. A file that fails to parse leaves the session as it was.
        """
        self.error = None
        try:
            entries = load_srt(content)
        except ParseError as e:
            self.error = str(e)
            raise

        logger.info("Loaded %d entries from %s", len(entries), file_name)
        self.reset()
        self.file_name = file_name
        self.file_entries = entries
        self.source_entries = entries
        self.state = SessionState.CONTEXT
        return entries

    def restore(self, content: str, context: TranslationContext) -> list[TranslatedEntry]:
        """Resume reviewing a previously exported translation of the loaded file.

        Blocks are joined to the loaded entries by id; entries missing from
        the translated file get the failure marker.
        """
        if self.state is not SessionState.CONTEXT:
            raise RuntimeError(f"Cannot restore a translation in state {self.state.value}")

        outputs = [
            BatchOutput(id=entry.id, translation=entry.text) for entry in load_srt(content)
        ]
        self.translated = reconcile(self.file_entries, outputs)
        self.context = context
        self.state = SessionState.REVIEWING
        return self.translated

    def translate(
        self,
        synopsis: str,
        characters: str,
        source_language: str,
        target_language: str,
        model: str = DEFAULT_MODEL,
    ) -> list[TranslatedEntry]:
        """Run the initial translation pass over the uploaded file."""
        if self.state is not SessionState.CONTEXT:
            raise RuntimeError(f"Cannot translate in state {self.state.value}")

        context = TranslationContext(
            synopsis=synopsis,
            characters=characters,
            original_source_language=source_language,
            current_source_language=source_language,
            target_language=target_language,
            model=model,
        )
        return self._run_pass(self.file_entries, context, SessionState.CONTEXT)

    def retranslate(
        self, target_language: str, source: RetranslationSource = "original"
    ) -> list[TranslatedEntry]:
        """Translate again, from the original file or from the edited translation."""
        if self.state is not SessionState.REVIEWING or self.context is None or not self.translated:
            raise RuntimeError("Nothing has been translated yet")

        if source == "edited":
            entries = [entry.as_source() for entry in self.translated]
            source_language = self.context.target_language
        elif source == "original":
            entries = self.file_entries
            source_language = self.context.original_source_language
        else:
            raise ValueError(f"Unknown re-translation source: {source}")

        context = self.context.model_copy(
            update={
                "current_source_language": source_language,
                "target_language": target_language,
            }
        )
        return self._run_pass(entries, context, SessionState.REVIEWING)

    def _run_pass(
        self,
        entries: list[SubtitleEntry],
        context: TranslationContext,
        fallback: SessionState,
    ) -> list[TranslatedEntry]:
        """Translate entries under context, committing only on full success."""
        retranslating = fallback is SessionState.REVIEWING
        try:
            api_key = self.credentials.get()
        except CredentialMissing as e:
            self.error = user_message(e)
            raise

        self.error = None
        self.state = SessionState.TRANSLATING
        self.progress = (0, len(entries))

        try:
            with self.client_factory(api_key) as client:
                translated = translate_entries(
                    entries,
                    context,
                    client,
                    on_progress=self._report_progress,
                    batch_size=self.batch_size,
                )
        except Exception as e:
            logger.error("Translation pass failed: %s", e)
            self.state = fallback
            self.error = user_message(e, retranslating=retranslating)
            raise
        finally:
            self.progress = None

        self.context = context
        self.source_entries = entries
        self.translated = translated
        self.state = SessionState.REVIEWING
        return translated

    def _report_progress(self, processed: int, total: int) -> None:
        """Record pass progress and forward it to the listener."""
        self.progress = (processed, total)
        if self.on_progress:
            self.on_progress(processed, total)

    def update_translation(self, entry_id: int, text: str) -> None:
        """Replace the translated text of one entry."""
        for i, entry in enumerate(self.translated):
            if entry.id == entry_id:
                self.translated[i] = entry.model_copy(update={"translated_text": text})
                return
        raise KeyError(entry_id)

    def failed_ids(self) -> list[int]:
        """Ids whose translation is still the failure marker."""
        return [entry.id for entry in self.translated if is_failure_marker(entry.translated_text)]

    def export(self) -> tuple[str, str]:
        """Return the download file name and the translated SRT content."""
        if not self.translated:
            raise RuntimeError("Nothing has been translated yet")
        return translated_filename(self.file_name), format_srt(self.translated)
