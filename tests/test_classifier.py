from __future__ import annotations

import numpy as np
import pytest
from conftest import make_sample

from backend.analytics.classifier import ClusterClassifier

CENTROIDS = np.array([[230.0, 2.0, 460.0], [230.0, 0.2, 46.0]])


def test_nearest_centroid_and_score() -> None:
    latest = make_sample(230.0, 2.0, 470.0)
    history = [make_sample(230.0, 0.2, 56.0), latest]
    result = ClusterClassifier().classify(latest, CENTROIDS, history)
    assert result.cluster_id == 0
    # distance 10 over an average distance of 10
    assert result.anomaly_score == pytest.approx(50.0)


def test_score_is_capped_at_100() -> None:
    latest = make_sample(230.0, 5.0, 1500.0)
    history = [make_sample(230.0, 2.0, 461.0), make_sample(230.0, 0.2, 47.0), latest]
    result = ClusterClassifier().classify(latest, CENTROIDS, history)
    assert result.cluster_id == 0
    assert result.anomaly_score == 100.0


def test_zero_average_distance_scores_zero() -> None:
    latest = make_sample(230.0, 2.0, 460.0)
    result = ClusterClassifier().classify(latest, CENTROIDS, [latest, latest])
    assert result.anomaly_score == 0.0


def test_distance_uses_raw_units() -> None:
    # Closer in volts, much further in watts: raw distance follows watts.
    centroids = np.array([[231.0, 2.0, 300.0], [200.0, 2.0, 460.0]])
    latest = make_sample(230.0, 2.0, 455.0)
    result = ClusterClassifier().classify(latest, centroids, [latest])
    assert result.cluster_id == 1


def test_classify_is_idempotent() -> None:
    latest = make_sample(229.0, 1.9, 430.0)
    history = [make_sample(230.0, 2.0, 455.0 + i) for i in range(10)] + [latest]
    classifier = ClusterClassifier()
    first = classifier.classify(latest, CENTROIDS, history)
    second = classifier.classify(latest, CENTROIDS, history)
    assert first == second


def test_no_centroids_means_no_classification() -> None:
    assert ClusterClassifier().classify(make_sample(), np.empty((0, 3)), []) is None
