"""
Shared pytest fixtures for relay tests.
"""

import io
import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Optional
from unittest.mock import MagicMock

import pytest

# Repo root holds the serverless and FastAPI entry points
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from panel_relay.api.gemini_client import GeminiClient
from panel_relay.utils.config import Settings
from panel_relay.utils.logger import setup_logger
from panel_relay.workflow.relay import Relay

GUIDE_IMAGE_URI = "data:image/jpeg;base64,R1VJREUtSU1BR0UtREFUQQ=="
COMPLEMENT_IMAGE_URI = "data:image/webp;base64,Q09NUExFTUVOVC1EQVRB"


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests with a mocked transport")


@pytest.fixture
def settings() -> Settings:
    """Settings with a credential, independent of the environment."""
    return Settings(
        google_api_key="test-secret-key",
        gemini_api_base="https://example.test/v1beta",
        script_model="script-model",
        image_model="image-model",
    )


@pytest.fixture
def settings_without_key() -> Settings:
    return Settings(
        google_api_key=None,
        gemini_api_key=None,
        gemini_api_base="https://example.test/v1beta",
        script_model="script-model",
        image_model="image-model",
    )


def make_response(status_code: int = 200, payload: Optional[Any] = None, text: Optional[str] = None) -> MagicMock:
    """Build a stand-in for requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    if payload is not None:
        response.json.return_value = payload
        response.text = json.dumps(payload)
    else:
        response.json.side_effect = ValueError("No JSON object could be decoded")
        response.text = text or ""
    return response


@pytest.fixture
def session() -> MagicMock:
    """Mocked HTTP session; tests set session.post.return_value."""
    return MagicMock()


@pytest.fixture
def relay_factory(session) -> Callable[[Settings], Relay]:
    def build(settings: Settings) -> Relay:
        return Relay(settings, client=GeminiClient(settings, session=session))
    return build


@pytest.fixture
def relay(relay_factory, settings) -> Relay:
    return relay_factory(settings)


def make_event(body: Any = None, method: str = "POST") -> Dict[str, Any]:
    """Build a serverless event with a JSON-encoded body."""
    return {
        "httpMethod": method,
        "body": body if isinstance(body, str) or body is None else json.dumps(body),
    }


def script_response(text: str) -> Dict[str, Any]:
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


def image_response(data: str = "UE5HLURBVEE=") -> Dict[str, Any]:
    return {
        "candidates": [{
            "content": {
                "role": "model",
                "parts": [
                    {"text": "Here is your panel."},
                    {"inlineData": {"mimeType": "image/png", "data": data}},
                ],
            }
        }]
    }


def sent_payload(session: MagicMock) -> Dict[str, Any]:
    """The JSON body of the single outbound call."""
    assert session.post.call_count == 1
    return session.post.call_args.kwargs["json"]


@pytest.fixture
def log_stream():
    """Route the relay logger into a buffer for the duration of a test."""
    stream = io.StringIO()
    setup_logger(log_level="DEBUG", stream=stream)
    yield stream
    setup_logger()
