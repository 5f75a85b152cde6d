import base64
import inspect

import pytest
from unittest.mock import AsyncMock, MagicMock
from anthropic.resources.messages import AsyncMessages
from google.genai.models import AsyncModels
from openai.resources.chat.completions import AsyncCompletions

from finrouter.client import FinanceRouter
from finrouter.config import Settings


def _signature_checked(method, return_value=None):
    """
    AsyncMock standing in for an SDK method.

    Arguments are bound against the real method's signature first, so a
    keyword the installed SDK does not accept fails the test with TypeError.
    """
    signature = inspect.signature(method)

    async def call(*args, **kwargs):
        signature.bind(None, *args, **kwargs)
        return return_value

    return AsyncMock(side_effect=call)


@pytest.fixture
def sdk_method():
    return _signature_checked


@pytest.fixture
def mock_env(monkeypatch):
    """Mock environment variables for API keys."""
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test-openai")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test-anthropic")
    monkeypatch.setenv("GOOGLE_API_KEY", "AIza-test-google")


@pytest.fixture
def settings():
    return Settings(
        anthropic_api_key="sk-test-anthropic",
        openai_api_key="sk-test-openai",
        google_api_key="AIza-test-google",
    )


@pytest.fixture
def router(settings):
    """Router whose SDK clients are replaced by mocks (no network)."""
    router = FinanceRouter(settings)

    anthropic_client = MagicMock()
    anthropic_client.messages.create = _signature_checked(
        AsyncMessages.create, MagicMock(content=[MagicMock(text="AAPL is up")])
    )
    router.providers["anthropic"]._client = anthropic_client

    openai_client = MagicMock()
    openai_client.chat.completions.create = _signature_checked(
        AsyncCompletions.create,
        MagicMock(choices=[MagicMock(message=MagicMock(content="openai says hi"))]),
    )
    router.providers["openai"]._client = openai_client

    gemini_client = MagicMock()
    gemini_client.aio.models.generate_content = _signature_checked(
        AsyncModels.generate_content, MagicMock(text="gemini says hi")
    )
    router.providers["google"]._client = gemini_client

    return router


def _b64(text: str) -> str:
    return base64.b64encode(text.encode("latin-1")).decode("ascii")


@pytest.fixture
def text_attachment():
    """report.txt as the chat UI sends it: percent-encoded, then base64."""
    return {
        "base64": _b64("Q1%20revenue%20up%2010%25"),
        "mediaType": "text/plain",
        "isText": True,
        "fileName": "report.txt",
    }


@pytest.fixture
def image_attachment():
    return {
        "base64": "iVBORw0KGgo=",
        "mediaType": "image/png",
        "isText": False,
        "fileName": "chart.png",
    }
