"""Data models for subcontext."""

from pydantic import BaseModel, ConfigDict, field_validator

from .timecode import calculate_duration


class SubtitleEntry(BaseModel):
    """A single subtitle entry with timing and text."""

    id: int
    start_time: str  # HH:MM:SS,mmm
    end_time: str  # HH:MM:SS,mmm
    text: str

    @property
    def duration_seconds(self) -> float:
        """Seconds the entry stays on screen (may be zero or negative)."""
        return calculate_duration(self.start_time, self.end_time)


class TranslatedEntry(SubtitleEntry):
    """A subtitle entry together with its translation."""

    translated_text: str

    def as_source(self) -> SubtitleEntry:
        """Reinterpret the translation as source text for another pass."""
        return SubtitleEntry(
            id=self.id,
            start_time=self.start_time,
            end_time=self.end_time,
            text=self.translated_text,
        )

    def to_srt_block(self) -> str:
        """Convert to SRT format block (no trailing blank line)."""
        return f"{self.id}\n{self.start_time} --> {self.end_time}\n{self.translated_text}"


class BatchInput(BaseModel):
    """Per-entry record sent to the translator."""

    id: int
    original_text: str
    duration_seconds: float


class BatchOutput(BaseModel):
    """Per-entry record expected back from the translator."""

    id: int
    translation: str

    @field_validator("id", mode="before")
    @classmethod
    def _integral_number(cls, value):
        # JSON numbers such as 3.0 come back from the schema's NUMBER type
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value


class TranslationContext(BaseModel):
    """Narrative and language settings for one translation pass."""

    model_config = ConfigDict(frozen=True)

    synopsis: str = ""
    characters: str = ""
    original_source_language: str
    current_source_language: str
    target_language: str
    model: str
