"""API key storage."""

import logging
from pathlib import Path

from .config import Config
from .errors import CredentialMissing
from .gemini import validate_api_key

logger = logging.getLogger(__name__)


class CredentialStore:
    """Holds the Gemini API key.

    A key from the environment wins; otherwise the key saved in the key file
    is used.
    """

    def __init__(self, key_file: str | Path, env_key: str | None = None):
        self.key_file = Path(key_file)
        self.env_key = env_key

    @classmethod
    def from_config(cls, config: Config) -> "CredentialStore":
        return cls(config.key_file, env_key=config.gemini_api_key)

    def get(self) -> str:
        """Return the current key, raising CredentialMissing when there is none."""
        if self.env_key:
            return self.env_key
        if self.key_file.is_file():
            key = self.key_file.read_text(encoding="utf-8").strip()
            if key:
                return key
        raise CredentialMissing(
            "No API key configured. Set GEMINI_API_KEY or run 'subcontext key set'."
        )

    def set(self, api_key: str) -> None:
        """Replace the saved key."""
        api_key = api_key.strip()
        if not validate_api_key(api_key):
            raise ValueError("API key must be non-empty and start with 'AIza'")
        self.key_file.parent.mkdir(parents=True, exist_ok=True)
        self.key_file.write_text(api_key, encoding="utf-8")
        self.key_file.chmod(0o600)
        logger.info("Saved API key to %s", self.key_file)

    def clear(self) -> None:
        """Forget the saved key. The environment key is left alone."""
        self.key_file.unlink(missing_ok=True)
        logger.info("Removed API key file %s", self.key_file)
