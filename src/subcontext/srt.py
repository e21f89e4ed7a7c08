"""SRT subtitle file parsing and generation."""

import logging
import re
from pathlib import Path

from .errors import ParseError
from .models import SubtitleEntry, TranslatedEntry
from .timecode import TIMECODE_PATTERN

logger = logging.getLogger(__name__)

_TIMING_RE = re.compile(rf"({TIMECODE_PATTERN})\s*-->\s*({TIMECODE_PATTERN})")
_BLOCK_SEPARATOR_RE = re.compile(r"\n\s*\n")


def parse_srt(content: str) -> list[SubtitleEntry]:
    """Parse SRT content into SubtitleEntry objects.

    Blocks with fewer than three lines, a zero or non-numeric id, or a bad
    timing line are skipped.

    Args:
        content: Raw SRT file content

    Returns:
        List of SubtitleEntry objects in file order
    """
    entries = []
    content = content.lstrip("\ufeff").replace("\r\n", "\n").replace("\r", "\n").strip()
    if not content:
        return entries

    for block in _BLOCK_SEPARATOR_RE.split(content):
        lines = block.split("\n")
        if len(lines) < 3:
            logger.debug("Skipping short block: %r", block[:80])
            continue

        try:
            entry_id = int(lines[0].strip())
        except ValueError:
            logger.debug("Skipping block with bad id: %r", lines[0])
            continue

        match = _TIMING_RE.match(lines[1].strip())
        if not entry_id or not match:
            logger.debug("Skipping block %r with bad id or timing line", lines[0])
            continue

        entries.append(
            SubtitleEntry(
                id=entry_id,
                start_time=match.group(1),
                end_time=match.group(2),
                text="\n".join(lines[2:]),
            )
        )

    return entries


def load_srt(content: str) -> list[SubtitleEntry]:
    """Parse SRT content, failing when nothing usable is found."""
    entries = parse_srt(content)
    if not entries:
        raise ParseError("file is empty or malformed")
    return entries


def format_srt(entries: list[TranslatedEntry]) -> str:
    """Convert translated entries to an SRT formatted string."""
    return "\n\n".join(entry.to_srt_block() for entry in entries)


def read_srt(path: str | Path) -> list[SubtitleEntry]:
    """Read and parse an SRT file.

    Args:
        path: Path to the SRT file

    Returns:
        List of SubtitleEntry objects
    """
    path = Path(path)
    content = path.read_text(encoding="utf-8-sig")
    return load_srt(content)


def write_srt(entries: list[TranslatedEntry], path: str | Path) -> None:
    """Write translated entries to an SRT file.

    Args:
        entries: List of TranslatedEntry objects
        path: Output file path
    """
    path = Path(path)
    path.write_text(format_srt(entries), encoding="utf-8")


def translated_filename(file_name: str) -> str:
    """Insert a _translated suffix before the extension of a file name."""
    path = Path(file_name)
    return path.with_name(f"{path.stem}_translated{path.suffix}").name
