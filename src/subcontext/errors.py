"""Exception hierarchy for subcontext."""


class SubcontextError(Exception):
    """Base class for all subcontext errors."""


class ParseError(SubcontextError):
    """The subtitle file is empty or has no well-formed entries."""


class CredentialMissing(SubcontextError):
    """No API key is configured."""


class TranslationError(SubcontextError):
    """A batch failed and the translation pass was aborted."""


class ApiError(TranslationError):
    """The translation endpoint answered with an error or was unreachable."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthOrQuotaError(ApiError):
    """The API key was rejected or its quota is exhausted."""


class MalformedResponseError(TranslationError):
    """A success response did not carry the expected JSON payload."""
