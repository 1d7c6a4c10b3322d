from __future__ import annotations

import numpy as np
import pytest
from conftest import make_sample, steady_samples

from backend.analytics.anomaly import ZScoreAnomalyDetector, calculate_z_score
from backend.analytics.telemetry import ABNORMAL, NORMAL, POWER_LOSS


@pytest.fixture
def detector() -> ZScoreAnomalyDetector:
    return ZScoreAnomalyDetector()


def test_missing_sample_is_power_loss(detector: ZScoreAnomalyDetector) -> None:
    result = detector.evaluate(None, [])
    assert result.label == POWER_LOSS
    assert result.confidence == 100.0
    assert result.z_scores == {"voltage": 0.0, "current": 0.0, "power": 0.0}


@pytest.mark.parametrize("voltage,current", [(5.0, 0.05), (9.99, 2.5), (230.0, 0.09)])
def test_power_loss_overrides_history(detector: ZScoreAnomalyDetector,
                                      voltage: float, current: float) -> None:
    current_sample = make_sample(voltage, current)
    history = steady_samples(40) + [current_sample]
    result = detector.evaluate(current_sample, history)
    assert result.label == POWER_LOSS
    assert result.confidence == 100.0


def test_constant_history_is_fully_normal(detector: ZScoreAnomalyDetector) -> None:
    history = [make_sample(230.1, 2.3, 529.23, i=i) for i in range(20)]
    result = detector.evaluate(history[-1], history)
    assert result.z_scores == {"voltage": 0.0, "current": 0.0, "power": 0.0}
    assert result.label == NORMAL
    assert result.confidence == 100.0


def test_short_history_gives_zero_scores(detector: ZScoreAnomalyDetector) -> None:
    sample = make_sample(300.0, 2.5)
    result = detector.evaluate(sample, [sample])
    assert result.label == NORMAL
    assert result.z_scores["voltage"] == 0.0


def test_voltage_spike_is_abnormal(detector: ZScoreAnomalyDetector) -> None:
    spike = make_sample(300.0, 2.5, i=35)
    history = steady_samples(35) + [spike]
    result = detector.evaluate(spike, history)
    assert abs(result.z_scores["voltage"]) > 2.5
    assert result.label == ABNORMAL
    assert 50.0 < result.confidence <= 100.0


def test_population_standard_deviation() -> None:
    # mean 2, population std sqrt(2/3)
    z = calculate_z_score(3.0, [1.0, 2.0, 3.0])
    assert z == pytest.approx(1.0 / np.sqrt(2.0 / 3.0))


def test_confidence_always_in_range(detector: ZScoreAnomalyDetector) -> None:
    rng = np.random.default_rng(7)
    for _ in range(200):
        n = int(rng.integers(0, 60))
        history = [make_sample(float(rng.uniform(0, 260)), float(rng.uniform(0, 5)),
                               float(rng.uniform(-10, 1500)), i=i) for i in range(n)]
        current = history[-1] if history else None
        result = detector.evaluate(current, history)
        assert 0.0 <= result.confidence <= 100.0
