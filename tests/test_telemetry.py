from __future__ import annotations

from datetime import datetime, timezone

import pytest

from backend.analytics.telemetry import Sample

PAYLOAD = {
    "voltage": 231.4,
    "current": 2.51,
    "power": 580.8,
    "currentLoss": 17.4,
    "monthlyPower": 171.2,
    "timestamp": 1767614400000,
}


def test_from_payload_maps_meter_fields() -> None:
    sample = Sample.from_payload(PAYLOAD)
    assert sample.voltage == 231.4
    assert sample.current_loss == 17.4
    assert sample.monthly_power == 171.2
    assert sample.timestamp == datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc)


def test_receipt_timestamp_takes_precedence() -> None:
    received = datetime(2026, 2, 1, tzinfo=timezone.utc)
    assert Sample.from_payload(PAYLOAD, timestamp=received).timestamp == received


def test_optional_fields_default_to_zero() -> None:
    sample = Sample.from_payload({"voltage": "230", "current": 2, "power": 460})
    assert sample.current_loss == 0.0
    assert sample.monthly_power == 0.0
    assert sample.timestamp.tzinfo is not None


@pytest.mark.parametrize("payload", [
    {"current": 2.5, "power": 500.0},
    {"voltage": "abc", "current": 2.5, "power": 500.0},
    {"voltage": float("nan"), "current": 2.5, "power": 500.0},
    {"voltage": -1.0, "current": 2.5, "power": 500.0},
    {"voltage": 230.0, "current": -0.5, "power": 500.0},
    {**PAYLOAD, "timestamp": float("inf")},
    {**PAYLOAD, "timestamp": float("nan")},
    {**PAYLOAD, "timestamp": 1e20},
    {**PAYLOAD, "timestamp": -1e20},
])
def test_malformed_payloads_raise(payload: dict) -> None:
    with pytest.raises(ValueError):
        Sample.from_payload(payload)


def test_sample_is_immutable() -> None:
    sample = Sample.from_payload(PAYLOAD)
    with pytest.raises(AttributeError):
        sample.voltage = 0.0
