import json

import httpx
import pytest

from subcontext.config import Config
from subcontext.credentials import CredentialStore
from subcontext.gemini import GeminiClient
from subcontext.models import SubtitleEntry, TranslationContext

API_KEY = "AIzaTestKey-0123456789"


def timecode(seconds: float) -> str:
    millis = round(seconds * 1000)
    hours, millis = divmod(millis, 3_600_000)
    minutes, millis = divmod(millis, 60_000)
    secs, millis = divmod(millis, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{millis:03d}"


def make_entries(ids) -> list[SubtitleEntry]:
    if isinstance(ids, int):
        ids = range(1, ids + 1)
    return [
        SubtitleEntry(
            id=i,
            start_time=timecode(i * 2),
            end_time=timecode(i * 2 + 1.5),
            text=f"Line {i}",
        )
        for i in ids
    ]


def make_context(**overrides) -> TranslationContext:
    values = {
        "synopsis": "Two siblings run a noodle shop in Osaka.",
        "characters": "Aki (older sister), Ren (younger brother)",
        "original_source_language": "Japanese",
        "current_source_language": "Japanese",
        "target_language": "English",
        "model": "gemini-2.5-flash",
    }
    values.update(overrides)
    return TranslationContext(**values)


def request_batch(request: httpx.Request) -> list[dict]:
    """The BatchInput records carried by a generateContent request."""
    body = json.loads(request.content)
    prompt = body["contents"][0]["parts"][0]["text"]
    return json.loads(prompt.split("\n\n", 1)[1])


def gemini_response(outputs, status_code: int = 200) -> httpx.Response:
    body = {
        "candidates": [
            {"content": {"parts": [{"text": json.dumps(outputs, ensure_ascii=False)}]}}
        ]
    }
    return httpx.Response(status_code, json=body)


def gemini_error(status_code: int, message: str) -> httpx.Response:
    return httpx.Response(
        status_code, json={"error": {"code": status_code, "message": message}}
    )


class FakeGemini:
    """MockTransport handler that translates every id to 'T<id>: <text>'.

    Ids in drop_ids are left out of the response; failures maps a request
    number (1-based) to a canned error response.
    """

    def __init__(self, drop_ids=(), failures=None):
        self.drop_ids = set(drop_ids)
        self.failures = failures or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        failure = self.failures.get(len(self.requests))
        if failure is not None:
            return failure
        outputs = [
            {"id": item["id"], "translation": f"T{item['id']}: {item['original_text']}"}
            for item in request_batch(request)
            if item["id"] not in self.drop_ids
        ]
        return gemini_response(outputs)

    def batches(self) -> list[list[dict]]:
        return [request_batch(r) for r in self.requests]

    def client(self, api_key: str = API_KEY, **kwargs) -> GeminiClient:
        return GeminiClient(
            api_key, http_client=httpx.Client(transport=httpx.MockTransport(self))
        )


@pytest.fixture
def fake_gemini() -> FakeGemini:
    return FakeGemini()


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(gemini_api_key=None, key_file=tmp_path / "api_key")


@pytest.fixture
def credentials(config) -> CredentialStore:
    return CredentialStore(config.key_file, env_key=API_KEY)
