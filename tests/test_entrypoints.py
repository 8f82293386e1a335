"""
Tests for the serverless handler (api/index.py) and the development server (app/main.py).
"""

import json

import pytest
from fastapi.testclient import TestClient

import api.index as serverless
import app.main as devserver
from conftest import image_response, make_event, make_response


@pytest.fixture
def http_client(relay, monkeypatch) -> TestClient:
    monkeypatch.setattr(devserver, "get_relay", lambda: relay)
    return TestClient(devserver.app)


@pytest.mark.unit
def test_serverless_handler_returns_response_mapping(relay, session, monkeypatch):
    monkeypatch.setattr(serverless, "relay", relay)
    session.post.return_value = make_response(payload=image_response("QUJD"))

    response = serverless.handler(make_event({"target": "image", "description": "A dragon"}), None)

    assert response == {
        "statusCode": 200,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps({"imageUrl": "data:image/png;base64,QUJD"}),
    }


@pytest.mark.unit
def test_serverless_handler_rejects_get(relay, monkeypatch):
    monkeypatch.setattr(serverless, "relay", relay)

    assert serverless.handler({"httpMethod": "GET"}, None) == {"statusCode": 405, "body": "Method Not Allowed"}


@pytest.mark.unit
def test_dev_server_relays_post(http_client, session):
    session.post.return_value = make_response(payload=image_response("QUJD"))

    response = http_client.post("/api/generate", content=json.dumps({"target": "image", "description": "A dragon"}))

    assert response.status_code == 200
    assert response.json() == {"imageUrl": "data:image/png;base64,QUJD"}


@pytest.mark.unit
def test_dev_server_passes_relay_errors_through(http_client, session):
    response = http_client.post("/api/generate", content=json.dumps({"target": "video"}))

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid API target specified."}
    assert session.post.call_count == 0


@pytest.mark.unit
def test_dev_server_get_is_405(http_client):
    response = http_client.get("/api/generate")

    assert response.status_code == 405
    assert response.text == "Method Not Allowed"


@pytest.mark.unit
def test_health(http_client):
    assert http_client.get("/api/health").json() == {"status": "ok"}


@pytest.mark.unit
def test_dev_server_rejects_invalid_utf8_like_the_handler(http_client, relay, session):
    raw = b'{"target": "image", "description": "\xff\xfe"}'

    response = http_client.post("/api/generate", content=raw)
    direct = relay.handle({"httpMethod": "POST", "body": raw})

    assert response.status_code == 500 == direct.status_code
    assert response.json() == json.loads(direct.body)
    assert session.post.call_count == 0


@pytest.mark.unit
def test_dev_server_runs_relay_in_threadpool(http_client, relay, session, monkeypatch):
    calls = []
    real_run_in_threadpool = devserver.run_in_threadpool

    async def recording_run_in_threadpool(func, *args):
        calls.append(func)
        return await real_run_in_threadpool(func, *args)

    monkeypatch.setattr(devserver, "run_in_threadpool", recording_run_in_threadpool)
    session.post.return_value = make_response(payload=image_response("QUJD"))

    response = http_client.post("/api/generate", content=json.dumps({"target": "image", "description": "A dragon"}))

    assert response.status_code == 200
    assert calls == [relay.handle]
