from __future__ import annotations

import numpy as np
import pytest

from backend.analytics import pipeline
from backend.analytics.inference import InferenceEngine
from backend.analytics.model import ClusterTrainer
from backend.analytics.service import create_app


@pytest.fixture
def engine() -> InferenceEngine:
    return InferenceEngine(trainer=ClusterTrainer(rng=np.random.default_rng(3)))


@pytest.fixture
def client(engine: InferenceEngine):
    app = create_app(engine)
    app.config["TESTING"] = True
    return app.test_client()


def _payload(i: int) -> dict:
    return {
        "voltage": 230.0 + (i % 5),
        "current": 2.4 + 0.05 * (i % 4),
        "power": (230.0 + (i % 5)) * (2.4 + 0.05 * (i % 4)),
        "currentLoss": 15.0,
        "monthlyPower": 160.0,
    }


def test_health(client) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "OK"


def test_status_before_any_sample(client) -> None:
    body = client.get("/status").get_json()
    assert body["latest"] is None
    assert body["anomaly"]["label"] == "POWER_LOSS"
    assert body["learning"]["is_learning"] is True
    assert body["load"]["status"] == "power_loss"
    assert body["metrics"] == {"voltage": "danger", "current": "danger"}


def test_process_until_trained(client) -> None:
    for i in range(30):
        resp = client.post("/process", json=_payload(i))
        assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "processed"
    assert body["state"] == "TRAINED"
    assert len(body["learning"]["clusters"]) == 4
    assert sum(c["count"] for c in body["learning"]["clusters"]) == 30
    assert set(body["learning"]["clusters"][0]["centroid"]) == {"voltage", "current", "power"}

    status = client.get("/status").get_json()
    assert status["learning"]["samples_collected"] == 30
    assert status["load"]["status"] in {"valid", "invalid"}


def test_process_rejects_bad_payloads(client) -> None:
    assert client.post("/process", data="not json").status_code == 400
    assert client.post("/process", json={"voltage": 230}).status_code == 400
    assert client.post("/process", json=[1, 2, 3]).status_code == 400


def test_summary(client) -> None:
    for i in range(3):
        client.post("/process", json=_payload(i))
    body = client.get("/summary").get_json()
    assert body["summary"]["samples"] == 3
    assert len(body["timeline"]) == 3
    assert all(t["status"] == "ON" for t in body["timeline"])


def test_control(client, monkeypatch) -> None:
    sent = []
    monkeypatch.setattr(pipeline, "set_power", lambda on: sent.append(on) or True)
    assert client.post("/control", json={"power": "off"}).get_json()["power"] == "OFF"
    assert sent == [False]
    assert client.post("/control", json={"power": "maybe"}).status_code == 400


def test_control_without_broker(client, monkeypatch) -> None:
    monkeypatch.setattr(pipeline, "set_power", lambda on: False)
    assert client.post("/control", json={"power": "ON"}).status_code == 503


def test_reset(client, engine: InferenceEngine) -> None:
    client.post("/process", json=_payload(0))
    body = client.post("/reset").get_json()
    assert body["state"] == "COLLECTING"
    assert engine.latest is None
