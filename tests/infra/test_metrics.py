import pytest
from prometheus_client import REGISTRY

from strata_oss.infra.observability.metrics import observe_operation
from strata_oss.infra.storage.errors import NotFoundError


def _count(operation: str, status: str) -> float:
    value = REGISTRY.get_sample_value(
        "storage_operations_total", {"operation": operation, "status": status}
    )
    return value or 0.0


def _latency_count(operation: str) -> float:
    value = REGISTRY.get_sample_value(
        "storage_operation_duration_seconds_count", {"operation": operation}
    )
    return value or 0.0


def test_success_is_counted():
    before = _count("put", "ok")
    latency_before = _latency_count("put")

    with observe_operation("put", bucket="b", key="mongo/a"):
        pass

    assert _count("put", "ok") == before + 1
    assert _latency_count("put") == latency_before + 1


def test_failure_is_counted_and_reraised():
    before = _count("delete", "error")

    with pytest.raises(RuntimeError):
        with observe_operation("delete", bucket="b", key="mongo/a"):
            raise RuntimeError("boom")

    assert _count("delete", "error") == before + 1


def test_not_found_has_its_own_status():
    before = _count("get", "not_found")
    errors_before = _count("get", "error")

    with pytest.raises(NotFoundError):
        with observe_operation("get", bucket="b", key="mongo/a"):
            raise NotFoundError("a")

    assert _count("get", "not_found") == before + 1
    assert _count("get", "error") == errors_before


def test_storage_calls_are_recorded(storage):
    before = _count("list", "ok")

    storage.list("snapshots/", 10)

    assert _count("list", "ok") == before + 1
