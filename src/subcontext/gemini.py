"""Gemini generateContent client for batch translation."""

import json
import logging

import httpx
from pydantic import TypeAdapter, ValidationError

from .config import DEFAULT_BASE_URL
from .errors import ApiError, AuthOrQuotaError, MalformedResponseError
from .languages import resolve_model
from .models import BatchOutput
from .prompt import BatchPrompt

logger = logging.getLogger(__name__)

API_KEY_PREFIX = "AIza"

# Substrings of an error message that point at the key or its quota
AUTH_OR_QUOTA_MARKERS = ("api key", "api_key", "permission denied", "quota")

UNKNOWN_API_ERROR = "An unknown API error occurred."

_OUTPUTS = TypeAdapter(list[BatchOutput])


def validate_api_key(api_key: str | None) -> bool:
    """Cheap format check for a Gemini API key.

    This does not prove the key works; the server decides that on the first
    translation request.
    """
    if not api_key or not isinstance(api_key, str):
        return False
    return bool(api_key.strip()) and api_key.startswith(API_KEY_PREFIX)


def is_auth_or_quota_message(message: str) -> bool:
    """Check whether an API error message points at the key or its quota."""
    lowered = message.lower()
    return any(marker in lowered for marker in AUTH_OR_QUOTA_MARKERS)


def _error_message(response: httpx.Response) -> str:
    """Server-provided error message, or a generic one when there is none."""
    try:
        data = response.json()
    except ValueError:
        return UNKNOWN_API_ERROR
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return UNKNOWN_API_ERROR


def _extract_text(data) -> str | None:
    """Pull candidates[0].content.parts[0].text out of a response body."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) and text else None


class GeminiClient:
    """Issues one generateContent request per translation batch.

    No retries or caching happen here; a failure is raised to the caller,
    which decides whether to run the pass again.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = None,
        http_client: httpx.Client | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout)

    def __enter__(self) -> "GeminiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client if this object created it."""
        if self._owns_client:
            self._http.close()

    def build_request_body(self, prompt: BatchPrompt, model: str) -> dict:
        """JSON body for a generateContent call with a strict response schema."""
        _, extra_config = resolve_model(model)
        return {
            "contents": [{"parts": [{"text": prompt.task_prompt}]}],
            "systemInstruction": {"parts": [{"text": prompt.system_instruction}]},
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": prompt.response_schema,
                **extra_config,
            },
        }

    def translate_batch(self, prompt: BatchPrompt, model: str) -> list[BatchOutput]:
        """Send one batch and return the parsed per-id translations."""
        model_name, _ = resolve_model(model)
        url = f"{self.base_url}/models/{model_name}:generateContent"
        body = self.build_request_body(prompt, model)

        try:
            response = self._http.post(url, params={"key": self.api_key}, json=body)
        except httpx.HTTPError as e:
            raise ApiError(f"Could not reach the translation service: {e}") from e

        if not response.is_success:
            message = _error_message(response)
            logger.warning("Gemini returned HTTP %s: %s", response.status_code, message)
            if is_auth_or_quota_message(message):
                raise AuthOrQuotaError(message, status_code=response.status_code)
            raise ApiError(message, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError("Response body is not JSON.") from e

        text = _extract_text(data)
        if text is None:
            raise MalformedResponseError("Invalid response structure from API.")

        try:
            return _OUTPUTS.validate_python(json.loads(text))
        except (json.JSONDecodeError, ValidationError) as e:
            raise MalformedResponseError(
                f"Translation payload does not match the schema: {e}\nPayload: {text[:500]}"
            ) from e
