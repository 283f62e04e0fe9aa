"""
HTTP API: search, rebuild triggers, status and job history, input validation.
Runs the backend against a temporary SQLite database and snapshot directory.
"""

import os
import sys
import tempfile
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Backend config is read at import time
_TMP = Path(tempfile.mkdtemp(prefix="foodindex-test-"))
os.environ["FOODINDEX_DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["FOODINDEX_STORAGE_DIR"] = str(_TMP / "index")
os.environ["FOODINDEX_LOCALES_CONFIG"] = ""
os.environ["FOODINDEX_BACKOFF_BASE"] = "0.01"
os.environ["FOODINDEX_BACKOFF_MAX"] = "0.02"

import pytest
from fastapi.testclient import TestClient

BACKEND = ROOT / "backend"
if str(BACKEND) not in sys.path:
    sys.path.insert(0, str(BACKEND))
from app.main import app
from app.database import SessionLocal
from app.models import Food, RebuildJob
from app.services.index_service import SqlRecordSource, get_index_server, shutdown_index_server

client = TestClient(app)


@pytest.fixture(scope="module", autouse=True)
def seeded_server():
    with SessionLocal() as db:
        db.add_all([
            Food(food_id="f1", locale_id="en", description="apple pie", popularity_rank=10),
            Food(food_id="f2", locale_id="en", description="apple juice", popularity_rank=20),
            Food(food_id="c1", locale_id="en", description="Chips", alt_names_json='["French fries"]'),
            Food(food_id="fr1", locale_id="fr", description="Pain complet"),
        ])
        db.commit()
    server = get_index_server()
    assert server.coordinator.wait_idle(10)
    yield server
    shutdown_index_server()


def _wait():
    assert get_index_server().coordinator.wait_idle(10)


def test_health():
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_search_misspelled_query():
    r = client.get("/api/locales/en/search", params={"q": "aple pie"})
    assert r.status_code == 200
    data = r.json()
    assert data["index_available"] is True
    assert data["version"] >= 1
    assert data["matches"][0]["food_id"] == "f1"
    assert data["matches"][0]["description"] == "apple pie"
    assert data["matches"][0]["score"] == pytest.approx(1.3)
    assert data["matches"][0]["matched_tokens"] == ["aple", "pie"]
    scores = [m["score"] for m in data["matches"]]
    assert scores == sorted(scores, reverse=True)


def test_search_alt_names_and_synonyms():
    data = client.get("/api/locales/en/search", params={"q": "fries"}).json()
    assert data["matches"][0]["food_id"] == "c1"


def test_search_limit():
    data = client.get("/api/locales/en/search", params={"q": "apple", "limit": 1}).json()
    assert len(data["matches"]) == 1


def test_search_unknown_locale_is_not_an_error():
    r = client.get("/api/locales/xx/search", params={"q": "apple"})
    assert r.status_code == 200
    assert r.json()["index_available"] is False
    assert r.json()["matches"] == []


def test_search_empty_query():
    data = client.get("/api/locales/en/search", params={"q": "  "}).json()
    assert data["index_available"] is True
    assert data["matches"] == []


def test_search_validation():
    assert client.get("/api/locales/en/search", params={"q": "a" * 501}).status_code == 400
    assert client.get("/api/locales/en/search", params={"q": "apple", "limit": 0}).status_code == 400
    assert client.get("/api/locales/en/search", params={"q": "apple", "limit": 101}).status_code == 400


def test_rebuild_increments_version():
    before = client.get("/api/locales/en/status").json()
    r = client.post("/api/locales/en/rebuild")
    assert r.status_code == 202
    assert r.json()["locale_id"] == "en"
    assert r.json()["outcome"] in ("scheduled", "deduplicated", "coalesced")
    _wait()
    after = client.get("/api/locales/en/status").json()
    assert after["state"] == "idle"
    assert after["version"] > before["version"]
    assert after["last_error"] is None


def test_rebuild_all():
    r = client.post("/api/rebuild")
    assert r.status_code == 202
    assert sorted(item["locale_id"] for item in r.json()) == ["en", "fr", "ta", "zh"]
    _wait()


def test_unknown_locale_rebuild_and_status():
    assert client.post("/api/locales/xx/rebuild").status_code == 404
    assert client.get("/api/locales/xx/status").status_code == 404


def test_list_locales():
    r = client.get("/api/locales")
    assert r.status_code == 200
    by_id = {s["locale_id"]: s for s in r.json()}
    assert set(by_id) == {"en", "fr", "ta", "zh"}
    assert by_id["fr"]["version"] >= 1


def test_rebuild_jobs_recorded():
    client.post("/api/locales/fr/rebuild")
    _wait()
    r = client.get("/api/rebuild/jobs", params={"locale_id": "fr"})
    assert r.status_code == 200
    jobs = r.json()
    assert jobs
    assert {j["status"] for j in jobs} >= {"started", "succeeded"}
    succeeded = [j for j in jobs if j["status"] == "succeeded"]
    assert succeeded[0]["indexed_records"] == 1
    assert client.get("/api/rebuild/jobs", params={"limit": 0}).status_code == 400


def test_sql_record_source_reads_foods():
    records = SqlRecordSource().fetch_food_records("en")
    by_id = {r.food_id: r for r in records}
    assert set(by_id) == {"f1", "f2", "c1"}
    assert by_id["c1"].alt_names == ("French fries",)
    assert by_id["f2"].popularity_rank == 20.0


def test_failed_rebuild_is_recorded_as_stale():
    with SessionLocal() as db:
        db.add(Food(food_id="t1", locale_id="ta", description="சோறு", alt_names_json="not json"))
        db.commit()
    client.post("/api/locales/ta/rebuild")
    _wait()
    status = client.get("/api/locales/ta/status").json()
    assert status["state"] == "stale"
    assert "RecordSourceError" in status["last_error"]
    with SessionLocal() as db:
        failed = db.query(RebuildJob).filter(RebuildJob.locale_id == "ta", RebuildJob.status == "failed").all()
        assert failed
        assert failed[-1].attempt == 3
