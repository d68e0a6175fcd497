from app.services.upload_workflow import UploadStatus
from app.services.workflow_registry import WorkflowRegistry

from conftest import JPEG_BYTES


class Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_same_session_id_returns_same_workflow(transform_service):
    registry = WorkflowRegistry(ttl_seconds=60)

    first = registry.get("a", transform_service)

    assert registry.get("a", transform_service) is first
    assert registry.get("b", transform_service) is not first


def test_workflow_uses_configured_ceiling(transform_service):
    registry = WorkflowRegistry(ttl_seconds=60, max_upload_bytes=2048)

    assert registry.get("a", transform_service).max_upload_bytes == 2048


def test_idle_sessions_are_evicted(transform_service):
    clock = Clock()
    registry = WorkflowRegistry(ttl_seconds=60, clock=clock)
    stale = registry.get("a", transform_service)
    stale.select(JPEG_BYTES, "image/jpeg")

    clock.now += 61
    fresh = registry.get("b", transform_service)

    assert len(registry) == 1
    assert stale.status == UploadStatus.IDLE
    assert registry.get("b", transform_service) is fresh


def test_access_keeps_session_alive(transform_service):
    clock = Clock()
    registry = WorkflowRegistry(ttl_seconds=60, clock=clock)
    workflow = registry.get("a", transform_service)

    clock.now += 45
    registry.get("a", transform_service)
    clock.now += 45

    assert registry.get("a", transform_service) is workflow


def test_cap_evicts_least_recently_used(transform_service):
    registry = WorkflowRegistry(ttl_seconds=60, max_sessions=2)
    oldest = registry.get("a", transform_service)
    oldest.select(JPEG_BYTES, "image/jpeg")
    registry.get("b", transform_service)

    registry.get("c", transform_service)

    assert len(registry) == 2
    assert "a" not in registry
    assert oldest.status == UploadStatus.IDLE
    assert oldest.session.source is None


def test_access_refreshes_position_under_cap(transform_service):
    registry = WorkflowRegistry(ttl_seconds=60, max_sessions=2)
    kept = registry.get("a", transform_service)
    registry.get("b", transform_service)
    registry.get("a", transform_service)

    registry.get("c", transform_service)

    assert "b" not in registry
    assert registry.get("a", transform_service) is kept


def test_many_sessions_stay_within_cap(transform_service):
    registry = WorkflowRegistry(ttl_seconds=60, max_sessions=100)

    for n in range(500):
        registry.get(f"session-{n}", transform_service).select(JPEG_BYTES, "image/jpeg")

    assert len(registry) == 100
    assert "session-499" in registry
    assert "session-399" not in registry
