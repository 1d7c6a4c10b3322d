"""
telemetry.py — Sample and Result Types
=======================================

Value types shared by every stage of the analytics engine:

    Sample               — one immutable meter reading
    Centroid             — a point in (voltage, current, power) space
    ZScoreResult         — statistical label for the latest sample
    Cluster              — one learned behaviour cluster
    ClassificationResult — nearest cluster + distance-based anomaly score
    LearningState        — everything the behaviour learner exposes

Results are derived values; they are rebuilt on every evaluation and never
persisted.
"""

import math
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Optional

# Z-score labels
NORMAL = "NORMAL"
ABNORMAL = "ABNORMAL"
POWER_LOSS = "POWER_LOSS"


@dataclass(frozen=True)
class Sample:
    """
    One electrical telemetry reading from the monitored load.

    Attributes:
        voltage (float): RMS voltage in volts (≥ 0).
        current (float): RMS current in amperes (≥ 0).
        power (float): Active power in watts.
        current_loss (float): Estimated power lost in wiring, watts.
        monthly_power (float): Meter's month-to-date energy, kWh.
        timestamp (datetime): Receipt time (UTC).
    """

    voltage: float
    current: float
    power: float
    current_loss: float = 0.0
    monthly_power: float = 0.0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_payload(cls, data: dict, timestamp: datetime = None) -> "Sample":
        """
        Build a Sample from an ESP32 telemetry payload.

        The meter publishes camelCase keys:
            { voltage, current, power, currentLoss, monthlyPower, timestamp }

        Args:
            data: Decoded JSON payload.
            timestamp: Receipt time.  When omitted, a numeric payload
                timestamp (epoch milliseconds) is used, else UTC now.

        Returns:
            A new Sample.

        Raises:
            ValueError: If a required channel is missing, not numeric,
                not finite, or voltage/current is negative, or the payload
                timestamp is not a representable epoch-ms value.
        """
        values = {}
        for key in ("voltage", "current", "power"):
            if data.get(key) is None:
                raise ValueError(f"Telemetry payload missing '{key}'")
            values[key] = _as_float(data[key], key)

        if values["voltage"] < 0 or values["current"] < 0:
            raise ValueError(
                f"Voltage and current must be non-negative "
                f"(got voltage={values['voltage']}, current={values['current']})"
            )

        if timestamp is None:
            raw_ts = data.get("timestamp")
            if isinstance(raw_ts, (int, float)) and not isinstance(raw_ts, bool):
                if not math.isfinite(raw_ts):
                    raise ValueError(f"Telemetry timestamp is not finite: {raw_ts}")
                try:
                    timestamp = datetime.fromtimestamp(raw_ts / 1000.0, tz=timezone.utc)
                except (OverflowError, OSError, ValueError) as exc:
                    raise ValueError(
                        f"Telemetry timestamp out of range: {raw_ts}"
                    ) from exc
            else:
                timestamp = datetime.now(timezone.utc)

        return cls(
            voltage=values["voltage"],
            current=values["current"],
            power=values["power"],
            current_loss=_as_float(data.get("currentLoss", 0) or 0, "currentLoss"),
            monthly_power=_as_float(data.get("monthlyPower", 0) or 0, "monthlyPower"),
            timestamp=timestamp,
        )

    def to_dict(self) -> dict:
        return {
            "voltage": self.voltage,
            "current": self.current,
            "power": self.power,
            "currentLoss": self.current_loss,
            "monthlyPower": self.monthly_power,
            "timestamp": self.timestamp.isoformat(),
        }


def _as_float(value, key: str) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Telemetry field '{key}' is not numeric: {value!r}")
    if not math.isfinite(result):
        raise ValueError(f"Telemetry field '{key}' is not finite: {value!r}")
    return result


@dataclass(frozen=True)
class Centroid:
    voltage: float
    current: float
    power: float


@dataclass
class ZScoreResult:
    """Anomaly label, per-channel z-scores and confidence (0-100)."""

    label: str
    z_scores: dict
    confidence: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Cluster:
    """
    One learned behaviour cluster.

    `id` is the positional index from the latest training pass; it does not
    identify the same real-world behaviour across retrains.
    """

    id: int
    centroid: Centroid
    label: str
    color: str
    count: int


@dataclass
class ClassificationResult:
    cluster_id: int
    anomaly_score: float


@dataclass
class LearningState:
    """Snapshot of the behaviour learner exposed to consumers."""

    clusters: list = field(default_factory=list)
    current_cluster: Optional[int] = None
    anomaly_score: float = 0.0
    is_learning: bool = True
    samples_collected: int = 0
    min_samples: int = 0

    def to_dict(self) -> dict:
        return asdict(self)
