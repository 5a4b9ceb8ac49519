from datetime import datetime, timedelta, timezone

import anyio
import pytest
from fastapi.testclient import TestClient

from controller.controller_dependencies import (
    get_batch_service,
    get_plagiarism_service,
    rate_limit,
)
from main import app
from model.usage import UsageRecord
from service.batch_service import BatchService
from service.plagiarism_service import PlagiarismService

from conftest import PHOTOSYNTHESIS

CHECK = "/api/v1/plagiarism/check"
BULK = "/api/v1/plagiarism/bulk"


class StubWorker:
    """Records scheduled batches instead of processing them."""

    def __init__(self) -> None:
        self.started = []

    def start(self, batch_id: str) -> None:
        self.started.append(batch_id)

    def running(self, batch_id: str) -> bool:
        return False


@pytest.fixture
def batch_service(batch_repo, analyzer, usage, clock) -> BatchService:
    service = BatchService(batch_repo, analyzer, usage, clock=clock, item_delay=0)
    service.worker = StubWorker()
    return service


@pytest.fixture
def client(analyzer, usage, batch_service):
    app.dependency_overrides[rate_limit] = lambda: None
    app.dependency_overrides[get_plagiarism_service] = lambda: PlagiarismService(analyzer, usage)
    app.dependency_overrides[get_batch_service] = lambda: batch_service
    yield TestClient(app)
    app.dependency_overrides.clear()


def _as(user: str) -> dict:
    return {"X-User-Id": user}


def test_healthz(client):
    assert client.get("/healthz").json() == {"ok": True}


def test_check_requires_user(client):
    r = client.post(CHECK, json={"text": PHOTOSYNTHESIS})
    assert r.status_code == 401


def test_check_rejects_empty_text(client):
    r = client.post(CHECK, json={"text": ""}, headers=_as("u1"))
    assert r.status_code == 400
    assert r.json()["detail"] == "Text is required"


def test_check_returns_analysis(client):
    r = client.post(CHECK, json={"text": PHOTOSYNTHESIS}, headers=_as("u1"))

    assert r.status_code == 200
    body = r.json()
    assert body["plagiarismScore"] == 100
    assert body["aiScore"] == 80
    assert body["overallScore"] == 90
    assert body["highlights"][0]["type"] == "plagiarized"
    assert body["matches"][0]["url"] == "https://en.wikipedia.org/wiki/Photosynthesis"
    assert body["usage"]["remaining"] == 4


def test_unlimited_tier_keeps_usage_shape(client, usage_store):
    annual = UsageRecord(
        userId="u9",
        tier="annual",
        subscriptionExpiry=datetime.now(timezone.utc) + timedelta(days=30),
    )
    anyio.run(usage_store.put, annual)

    r = client.post(CHECK, json={"text": "Bees make honey behind the barn."}, headers=_as("u9"))

    assert r.status_code == 200
    body = r.json()
    assert body["usage"] == {
        "remaining": None,
        "limit": None,
        "isDaily": True,
        "dailyUsageCount": 1,
        "totalUsageCount": 1,
    }
    assert body["highlights"][0]["type"] == "safe"
    assert "source" not in body["highlights"][0]
    assert "url" not in body["highlights"][0]


def test_check_over_limit_reports_reason(client):
    for _ in range(5):
        assert client.post(CHECK, json={"text": PHOTOSYNTHESIS}, headers=_as("u1")).status_code == 200

    r = client.post(CHECK, json={"text": PHOTOSYNTHESIS}, headers=_as("u1"))

    assert r.status_code == 403
    assert r.json()["detail"]["reason"] == "FREE_LIMIT_REACHED"


def test_bulk_rejects_oversized_batch(client, batch_service):
    r = client.post(BULK, json={"texts": ["text"] * 11}, headers=_as("u1"))
    assert r.status_code == 400
    assert batch_service.worker.started == []


def test_bulk_lifecycle(client, batch_service):
    r = client.post(BULK, json={"texts": [PHOTOSYNTHESIS, "second"], "filenames": ["a.txt"]}, headers=_as("u1"))
    assert r.status_code == 202
    batch_id = r.json()["batchId"]
    assert r.json()["totalItems"] == 2
    assert batch_service.worker.started == [batch_id]

    status = client.get(f"{BULK}/{batch_id}", headers=_as("u1"))
    assert status.status_code == 200
    view = status.json()
    assert view["status"] == "pending"
    assert view["progress"] == 0
    assert [i["filename"] for i in view["items"]] == ["a.txt", "Document 2"]
    assert "text" not in view["items"][0]

    listed = client.get(BULK, headers=_as("u1")).json()
    assert [b["id"] for b in listed] == [batch_id]

    assert client.get(f"{BULK}/{batch_id}", headers=_as("u2")).status_code == 403
    assert client.delete(f"{BULK}/{batch_id}", headers=_as("u2")).status_code == 403

    assert client.delete(f"{BULK}/{batch_id}", headers=_as("u1")).json() == {"ok": True}
    assert client.get(f"{BULK}/{batch_id}", headers=_as("u1")).status_code == 404


def test_unknown_batch_is_404(client):
    assert client.get(f"{BULK}/missing", headers=_as("u1")).status_code == 404
