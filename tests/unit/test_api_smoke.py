"""
API Smoke Tests

Tests for the FastAPI endpoints:
1. GET /health reports configured backends
2. POST /markets, duplicates answer 409
3. POST /evidence by CID or upload
4. POST /resolve commits, a second resolve answers 409
5. GET /logs and /logs/{market_id}
6. POST /reconsider is advisory
7. Scheduling validation and cancellation
"""

import pytest
from fastapi.testclient import TestClient

from api.app import create_app

from fixtures.common import (
    DEFAULT_QUESTION,
    analyze_json,
    judge_json,
    make_service,
    recon_judgment_json,
    research_json,
)

MARKET_ID = "marathon-2026"


@pytest.fixture
def service():
    svc = make_service([research_json(), judge_json("YES")])
    yield svc
    svc.close()


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


def create_market(client, market_id=MARKET_ID):
    return client.post("/markets", json={"market_id": market_id, "question": DEFAULT_QUESTION})


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["details"]["ledger_backend"] == "memory"
        assert data["details"]["llm_configured"] is True

    def test_root(self, client):
        assert client.get("/").json()["ok"] is True


class TestMarkets:
    def test_create(self, client):
        response = create_market(client)

        assert response.status_code == 201
        market = response.json()["market"]
        assert market["market_id"] == MARKET_ID
        assert market["status"] == "Open"
        assert market["outcome"] == "Unset"
        assert len(market["ledger_address"]) == 44

    def test_duplicate(self, client):
        create_market(client)
        response = create_market(client)

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "MARKET_EXISTS"

    def test_unknown_market(self, client):
        response = client.get("/markets/nope")

        assert response.status_code == 404
        assert response.json()["ok"] is False
        assert response.json()["error"]["code"] == "MARKET_NOT_FOUND"

    def test_list_with_filter(self, client):
        create_market(client)

        assert client.get("/markets", params={"status": "Open"}).json()["count"] == 1
        assert client.get("/markets", params={"status": "Resolved"}).json()["count"] == 0

    def test_bad_status_filter(self, client):
        response = client.get("/markets", params={"status": "Closed"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_missing_question(self, client):
        assert client.post("/markets", json={"market_id": MARKET_ID}).status_code == 422


class TestEvidence:
    def test_by_cid(self, client):
        create_market(client)

        response = client.post(
            "/evidence",
            data={"market_id": MARKET_ID, "cid": "bafkreiresults", "description": "Official results"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["evidence"]["cid"] == "bafkreiresults"
        assert data["evidence_count"] == 1
        assert data["url"].endswith("/bafkreiresults")

    def test_by_upload(self, client, service):
        create_market(client)

        response = client.post(
            "/evidence",
            data={"market_id": MARKET_ID, "submitter": "alice"},
            files={"file": ("results.txt", b"Winner: 2:04:31", "text/plain")},
        )

        assert response.status_code == 201
        evidence = response.json()["evidence"]
        assert evidence["cid"].startswith("bafkrei")
        assert evidence["filename"] == "results.txt"
        assert service.content_store.get(evidence["cid"]) == b"Winner: 2:04:31"

    def test_neither_file_nor_cid(self, client):
        create_market(client)

        response = client.post("/evidence", data={"market_id": MARKET_ID})

        assert response.status_code == 400

    def test_unknown_market(self, client):
        response = client.post("/evidence", data={"market_id": "nope", "cid": "bafkreix"})

        assert response.status_code == 404


class TestResolve:
    def test_resolve_then_conflict(self, client, service):
        create_market(client)

        response = client.post("/resolve", json={"market_id": MARKET_ID})

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["summary"]["decision"] == "YES"
        assert data["summary"]["settlement"] == "committed"
        assert data["summary"]["signature"].startswith("sig_")
        assert data["market"]["status"] == "Resolved"
        assert data["confidence"] == 85

        again = client.post("/resolve", json={"market_id": MARKET_ID})
        assert again.status_code == 409
        assert again.json()["error"]["code"] == "MARKET_ALREADY_RESOLVED"

    def test_resolve_unknown_market(self, client):
        assert client.post("/resolve", json={"market_id": "nope"}).status_code == 404

    def test_logs(self, client):
        create_market(client)
        client.post("/resolve", json={"market_id": MARKET_ID})

        global_logs = client.get("/logs", params={"limit": 5}).json()
        market_logs = client.get(f"/logs/{MARKET_ID}", params={"limit": 1000}).json()

        assert global_logs["count"] == 5
        messages = [e["message"] for e in market_logs["logs"]]
        assert "VERDICT: YES" in messages

        last_seq = market_logs["logs"][-1]["seq"]
        assert client.get("/logs", params={"since": last_seq}).json()["count"] == 0

    def test_bad_workflow_filter(self, client):
        assert client.get("/logs", params={"workflow": "audit"}).status_code == 400


class TestSchedule:
    def test_requires_time(self, client):
        create_market(client)
        assert client.post("/resolve/schedule", json={"market_id": MARKET_ID}).status_code == 422

    def test_schedule_and_cancel(self, client):
        create_market(client)

        response = client.post("/resolve/schedule", json={"market_id": MARKET_ID, "delay_s": 3600})
        assert response.status_code == 202
        assert response.json()["job_id"] == f"resolve:{MARKET_ID}"

        cancelled = client.delete(f"/resolve/schedule/{MARKET_ID}")
        assert cancelled.status_code == 200
        assert cancelled.json()["cancelled"] is True

    def test_cancel_unknown(self, client):
        assert client.delete("/resolve/schedule/nope").status_code == 404


class TestReconsider:
    def test_reconsider(self):
        service = make_service([analyze_json(), recon_judgment_json("OVERTURN", 80)])
        try:
            client = TestClient(create_app(service))
            create_market(client)

            response = client.post("/reconsider", json={
                "market_id": MARKET_ID,
                "original_outcome": "YES",
                "evidence_cid": "bafkreicertified",
            })

            assert response.status_code == 200
            result = response.json()["result"]
            assert result["recommendation"] == "OVERTURN"
            assert result["new_outcome"] == "NO"
            assert result["confidence_delta"] == -80

            listing = client.get("/reconsider/logs").json()
            assert len(listing["results"]) == 1
            assert listing["logs"][0]["workflow"] == "reconsideration"
        finally:
            service.close()

    def test_outcome_must_be_yes_or_no(self, client):
        response = client.post("/reconsider", json={
            "market_id": MARKET_ID,
            "original_outcome": "MAYBE",
            "evidence_cid": "bafkreicertified",
        })
        assert response.status_code == 422


class TestServiceSingleton:
    def test_concurrent_first_requests_share_one_service(self, monkeypatch):
        import threading
        import time
        from types import SimpleNamespace

        from api import deps

        built = []

        def slow_build(config=None):
            time.sleep(0.05)
            svc = make_service()
            built.append(svc)
            return svc

        monkeypatch.setattr(deps, "build_service", slow_build)
        request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(service=None)))
        seen = []

        def first_request():
            seen.append(deps.get_service(request))

        threads = [threading.Thread(target=first_request) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        try:
            assert len(built) == 1
            assert all(svc is built[0] for svc in seen)
            assert request.app.state.service is built[0]
        finally:
            for svc in built:
                svc.close()
