from __future__ import annotations

from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from backend.analytics.telemetry import Sample

T0 = datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc)


def make_sample(voltage: float = 230.0, current: float = 2.5, power: float | None = None,
                i: int = 0, current_loss: float = 0.0, monthly_power: float = 0.0) -> Sample:
    if power is None:
        power = voltage * current
    return Sample(
        voltage=voltage,
        current=current,
        power=power,
        current_loss=current_loss,
        monthly_power=monthly_power,
        timestamp=T0 + timedelta(seconds=5 * i),
    )


def steady_samples(n: int, start: int = 0) -> list[Sample]:
    """Energized samples with small deterministic ripple around 230 V / 2.5 A."""
    samples = []
    for i in range(start, start + n):
        v = 230.0 + 5.0 * np.sin(i)
        c = 2.5 + 0.2 * np.cos(i)
        samples.append(make_sample(float(v), float(c), i=i))
    return samples


def power_band_samples() -> list[Sample]:
    """30 samples in four well separated power bands at a fixed 230 V."""
    bands = [(50.0, 10), (300.0, 8), (700.0, 7), (150.0, 5)]
    samples = []
    i = 0
    for power, count in bands:
        for j in range(count):
            p = power + (j - count / 2) * 2.0
            samples.append(make_sample(230.0, p / 230.0, p, i=i))
            i += 1
    return samples


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)
