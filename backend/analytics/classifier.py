"""
classifier.py — Live Cluster Assignment and Anomaly Score
==========================================================

Places the latest sample among the centroids of the latest training pass.

Distances here are Euclidean in RAW units (volts, amps, watts), unlike
training, which measures distance in min-max normalized space.  In raw units
the power channel dominates; that is how the score is defined.

    nearest       = argmin_i ‖latest − centroid_i‖
    avg_dist      = mean over the window of each sample's distance to its
                    closest centroid
    anomaly_score = min(100, ‖latest − nearest‖ / (2 · avg_dist) · 100)
                    or 0 when avg_dist is 0
"""

import logging
from typing import Optional

import numpy as np

from .feature_engineering import samples_to_array
from .model import pairwise_distances
from .telemetry import ClassificationResult, Sample

logger = logging.getLogger("analytics.classifier")


class ClusterClassifier:
    """Stateless nearest-centroid classifier."""

    def classify(self, latest: Sample, centroids,
                 history) -> Optional[ClassificationResult]:
        """
        Classify the latest sample and score how far it sits from its cluster.

        Pure function of its inputs: calling it twice with the same
        arguments gives the same result.

        Args:
            latest: Sample to classify.
            centroids: (k, 3) array-like in original units.
            history: Window snapshot used as the distance baseline.

        Returns:
            ClassificationResult, or None if there are no centroids.
        """
        centroids = np.asarray(centroids, dtype=np.float64)
        if centroids.size == 0:
            return None

        point = samples_to_array([latest])
        latest_dist = pairwise_distances(point, centroids)[0]
        nearest = int(latest_dist.argmin())
        min_dist = float(latest_dist[nearest])

        baseline = samples_to_array(history)
        if len(baseline) == 0:
            avg_dist = 0.0
        else:
            avg_dist = float(pairwise_distances(baseline, centroids).min(axis=1).mean())

        if avg_dist == 0:
            score = 0.0
        else:
            score = min(100.0, (min_dist / (avg_dist * 2)) * 100)

        logger.debug(f"Classified into cluster {nearest}: dist={min_dist:.3f} "
                     f"avg={avg_dist:.3f} score={score:.1f}")
        return ClassificationResult(cluster_id=nearest, anomaly_score=score)
