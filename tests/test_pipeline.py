from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from backend.analytics import config
from backend.analytics.inference import InferenceEngine
from backend.analytics.pipeline import _on_message, decode_payload, process_incoming_telemetry


def test_decode_payload() -> None:
    assert decode_payload(b'{"voltage": 230}') == {"voltage": 230}
    with pytest.raises(ValueError):
        decode_payload(b"[1, 2]")
    with pytest.raises(ValueError):
        decode_payload(b"not json")


def test_malformed_telemetry_is_dropped() -> None:
    engine = InferenceEngine()
    assert process_incoming_telemetry({"voltage": "x", "current": 1, "power": 1},
                                      engine=engine) is None
    assert engine.latest is None


def test_valid_telemetry_reaches_engine() -> None:
    engine = InferenceEngine()
    result = process_incoming_telemetry(
        {"voltage": 231.0, "current": 2.5, "power": 577.5, "timestamp": 0}, engine=engine)
    assert result["anomaly"].label == "NORMAL"
    # Receipt time replaces the meter's clock
    assert engine.latest.timestamp.year > 1970


def test_on_message_feeds_userdata_engine() -> None:
    engine = InferenceEngine()
    msg = SimpleNamespace(topic=config.MQTT_REALTIME_TOPIC,
                          payload=json.dumps({"voltage": 3.0, "current": 0.01, "power": 0.0}).encode())
    _on_message(None, engine, msg)
    assert engine.anomaly.label == "POWER_LOSS"

    _on_message(None, engine, SimpleNamespace(topic=config.MQTT_REALTIME_TOPIC, payload=b"{oops"))
    _on_message(None, engine, SimpleNamespace(topic="other/topic", payload=b"{}"))
    assert len(engine.snapshot()) == 1
