import asyncio

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services.gemini_service import get_transform_service
from app.services.workflow_registry import WorkflowRegistry, get_workflow_registry

from conftest import JPEG_BYTES, PNG_BYTES, FakeTransformService, make_response


@pytest.fixture
def registry():
    return WorkflowRegistry(ttl_seconds=3600, max_upload_bytes=1024)


@pytest.fixture
def client(registry, transform_service):
    app.dependency_overrides[get_workflow_registry] = lambda: registry
    app.dependency_overrides[get_transform_service] = lambda: transform_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def upload(client, data=JPEG_BYTES, mime_type="image/jpeg", name="product.jpg"):
    return client.post("/api/upload", files={"file": (name, data, mime_type)})


def test_healthcheck(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "Healthcheck Passed"}


def test_new_visitor_gets_idle_session_and_cookie(client):
    response = client.get("/api/upload")

    assert response.status_code == 200
    assert response.json()["status"] == "idle"
    assert "upload_session_id" in response.cookies


def test_select_process_download(client, transform_service):
    selected = upload(client)
    assert selected.status_code == 200
    body = selected.json()
    assert body["status"] == "selected"
    assert body["preview_url"] == f"/api/upload/preview/{body['preview_id']}"

    preview = client.get(body["preview_url"])
    assert preview.status_code == 200
    assert preview.content == JPEG_BYTES
    assert preview.headers["content-type"] == "image/jpeg"

    processed = client.post("/api/upload/process", params={"wait": True})
    assert processed.status_code == 200
    assert processed.json()["status"] == "succeeded"
    assert processed.json()["progress_percent"] == 100
    assert processed.json()["result_url"] == "/api/upload/result"

    result = client.get("/api/upload/result")
    assert result.status_code == 200
    assert result.content == PNG_BYTES
    assert result.headers["content-type"] == "image/png"
    assert result.headers["content-disposition"].startswith('attachment; filename="tiktop-size-')
    assert len(transform_service.calls) == 1


def test_oversized_upload_is_rejected(client, transform_service):
    response = upload(client, data=b"\x00" * 2048, mime_type="image/png", name="big.png")

    assert response.status_code == 422
    body = response.json()
    assert body["status"] == "idle"
    assert body["error_kind"] == "validation"
    assert "too large" in body["error_message"]
    assert transform_service.calls == []


def test_wrong_type_upload_is_rejected(client):
    response = upload(client, data=b"GIF89a", mime_type="image/gif", name="anim.gif")

    assert response.status_code == 422
    assert "Invalid file type" in response.json()["error_message"]


def test_stale_preview_is_not_found(client):
    old = upload(client).json()["preview_url"]
    upload(client, data=PNG_BYTES, mime_type="image/png", name="new.png")

    assert client.get(old).status_code == 404


def test_process_without_selection_conflicts(client):
    response = client.post("/api/upload/process", params={"wait": True})

    assert response.status_code == 409
    assert response.json()["status"] == "idle"


def test_download_without_result_conflicts(client):
    upload(client)

    assert client.get("/api/upload/result").status_code == 409


def test_empty_result_then_dismiss_and_reset(registry):
    service = FakeTransformService(response=make_response([]))
    app.dependency_overrides[get_workflow_registry] = lambda: registry
    app.dependency_overrides[get_transform_service] = lambda: service
    try:
        with TestClient(app) as client:
            upload(client)
            failed = client.post("/api/upload/process", params={"wait": True}).json()
            assert failed["status"] == "failed"
            assert failed["error_kind"] == "empty_result"

            dismissed = client.post("/api/upload/dismiss-error").json()
            assert dismissed["status"] == "failed"
            assert dismissed["error_message"] is None

            reset = client.post("/api/upload/reset").json()
            assert reset["status"] == "idle"
            assert reset["preview_id"] is None
            assert client.post("/api/upload/reset").json() == reset
    finally:
        app.dependency_overrides.clear()


def test_missing_credential_fails_immediately(registry):
    service = FakeTransformService(api_key="")
    app.dependency_overrides[get_workflow_registry] = lambda: registry
    app.dependency_overrides[get_transform_service] = lambda: service
    try:
        with TestClient(app) as client:
            upload(client)
            response = client.post("/api/upload/process")
            assert response.status_code == 200
            assert response.json()["status"] == "failed"
            assert response.json()["error_kind"] == "configuration"
            assert service.calls == []
    finally:
        app.dependency_overrides.clear()


def test_background_process_then_reset(client, transform_service):
    transform_service.gate = asyncio.Event()
    upload(client)

    first = client.post("/api/upload/process")
    second = client.post("/api/upload/process")

    assert first.status_code == 202
    assert first.json()["status"] == "processing"
    assert second.json()["status"] == "processing"

    reset = client.post("/api/upload/reset")
    assert reset.json()["status"] == "idle"
    assert len(transform_service.calls) <= 1


def test_sessions_are_isolated_per_cookie(client, registry):
    upload(client)

    with TestClient(app) as other:
        assert other.get("/api/upload").json()["status"] == "idle"

    assert len(registry) == 2


def test_cookieless_clients_cannot_grow_registry_past_cap(transform_service):
    registry = WorkflowRegistry(ttl_seconds=3600, max_upload_bytes=1024, max_sessions=10)
    app.dependency_overrides[get_workflow_registry] = lambda: registry
    app.dependency_overrides[get_transform_service] = lambda: transform_service
    try:
        for _ in range(30):
            with TestClient(app) as client:
                assert upload(client).status_code == 200
    finally:
        app.dependency_overrides.clear()

    assert len(registry) == 10
