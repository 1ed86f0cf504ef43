import json

import httpx
import pytest

from settings import Settings

SAMPLE_CARD = {
    "英语": "justice",
    "关键词": "just（只）+ice（冰）",
    "世界观": "现代日常生活",
    "图像描述": "一个小孩只得到了一个冰激凌，但也算是**公平**地解决了 🍦",
}


@pytest.fixture
def settings(monkeypatch) -> Settings:
    """Settings with a fake key and a short deadline. No network access in unit tests."""
    for name in ("SCENECARD_API_KEY", "SCENECARD_ENDPOINT", "SCENECARD_BASE_URL", "SCENECARD_MODEL"):
        monkeypatch.delenv(name, raising=False)
    return Settings(
        api_key="test-key-not-used-in-unit-tests",
        base_url="https://llm.test/v1",
        model="test-model",
        timeout_seconds=5.0,
        retry_base_delay=1.0,
    )


@pytest.fixture
def sample_card() -> dict:
    return dict(SAMPLE_CARD)


def sse_line(**delta) -> bytes:
    """One event frame carrying `delta` as choices[0].delta."""
    frame = {"id": "chunk", "object": "chat.completion.chunk",
             "choices": [{"index": 0, "delta": delta}]}
    return f"data: {json.dumps(frame, ensure_ascii=False)}\n\n".encode("utf-8")


def mock_http_client(handler) -> httpx.AsyncClient:
    """httpx client whose requests are answered by `handler(request)`."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))
