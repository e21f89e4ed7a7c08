"""Configuration management via environment variables."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .languages import DEFAULT_MODEL

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


def _default_key_file() -> Path:
    """Per-user location of the saved API key."""
    return Path.home() / ".config" / "subcontext" / "api_key"


@dataclass
class Config:
    """Application configuration loaded from environment."""

    gemini_api_key: str | None = None
    gemini_base_url: str = DEFAULT_BASE_URL
    default_model: str = DEFAULT_MODEL
    key_file: Path = field(default_factory=_default_key_file)
    timeout: float | None = None

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        load_dotenv()
        key_file = os.getenv("SUBCONTEXT_KEY_FILE")
        timeout = os.getenv("SUBCONTEXT_TIMEOUT")
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY"),
            gemini_base_url=os.getenv("GEMINI_BASE_URL", DEFAULT_BASE_URL),
            default_model=os.getenv("SUBCONTEXT_MODEL", DEFAULT_MODEL),
            key_file=Path(key_file).expanduser() if key_file else _default_key_file(),
            timeout=float(timeout) if timeout else None,
        )

    def has_gemini(self) -> bool:
        """Check if a Gemini API key is configured in the environment."""
        return bool(self.gemini_api_key)
