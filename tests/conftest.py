import base64
import json
from typing import Callable, List

import httpx
import pytest

from recraft_mcp.config import Settings
from recraft_mcp.providers.recraft_provider import RecraftProvider

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
PNG_B64 = base64.b64encode(PNG_BYTES).decode("ascii")


def json_response(payload, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload).encode(),
                          headers={"Content-Type": "application/json"})


@pytest.fixture
def settings(monkeypatch, tmp_path) -> Settings:
    # Keep a developer's .env out of the picture.
    monkeypatch.chdir(tmp_path)
    return Settings(api_key="test-key", api_url="https://api.test")


@pytest.fixture
def captured() -> List[httpx.Request]:
    return []


@pytest.fixture
def make_provider(settings, captured) -> Callable[..., RecraftProvider]:
    """Build a provider whose HTTP calls are answered by ``handler``."""

    def factory(handler) -> RecraftProvider:
        def recording_handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return handler(request)

        return RecraftProvider(settings, transport=httpx.MockTransport(recording_handler))

    return factory
