"""
model.py — K-Means Behaviour Model (ClusterTrainer)
====================================================

Learns K operating regimes of the monitored load from the current window.

Training pass:
    1. Min-max normalize voltage, current and power independently.
    2. Seed K centroids with k-means++:
         - first centroid: a uniformly random point
         - each next centroid: roulette-wheel draw with probability
           proportional to the squared distance from each point to its
           nearest already-chosen centroid
    3. Lloyd iterations (≤ max_iterations):
         - assign every point to its nearest centroid (lowest index on ties)
         - stop as soon as the assignments equal the previous iteration's
         - move every centroid to the mean of its members; a centroid with
           no members stays where it is
    4. Denormalize the centroids back to volts / amps / watts.

Why a hand-rolled Lloyd loop instead of sklearn.cluster.KMeans?
    - sklearn relocates empty clusters; here an empty cluster keeps its
      previous centroid.
    - A single k-means++ seed per pass, no multiple restarts.
    - Convergence is "assignments unchanged", not a centroid tolerance.

The model is rebuilt from scratch on every pass: there is no warm start and
no matching of new clusters to old ones, so cluster ids are positional.
Passing a seeded numpy Generator makes a pass reproducible.
"""

import logging
from dataclasses import dataclass

import numpy as np

from . import config
from .feature_engineering import samples_to_array
from .preprocessing import FeatureNormalizer

logger = logging.getLogger("analytics.model")


@dataclass
class TrainingResult:
    """
    Outcome of one training pass.

    Attributes:
        centroids: (k, 3) array in original units; empty when training
            was skipped.
        assignments: (n,) int array, cluster index per training sample.
    """

    centroids: np.ndarray
    assignments: np.ndarray

    @property
    def is_empty(self) -> bool:
        return len(self.centroids) == 0

    def counts(self, k: int) -> np.ndarray:
        """Number of training samples assigned to each of k clusters."""
        return np.bincount(self.assignments.astype(np.int64), minlength=k)


def _empty_result() -> TrainingResult:
    return TrainingResult(
        centroids=np.empty((0, len(config.FEATURE_NAMES)), dtype=np.float64),
        assignments=np.empty(0, dtype=np.int64),
    )


def pairwise_distances(points: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Euclidean distance matrix of shape (n_points, n_centroids)."""
    diff = points[:, np.newaxis, :] - centroids[np.newaxis, :, :]
    return np.sqrt((diff ** 2).sum(axis=2))


def kmeans_plus_plus(points: np.ndarray, k: int,
                     rng: np.random.Generator) -> np.ndarray:
    """
    Choose k initial centroids from `points` with k-means++ seeding.

    Args:
        points: (n, d) normalized feature matrix, n ≥ k.
        k: Number of centroids.
        rng: Random source.

    Returns:
        (k, d) array of seed centroids (copies of chosen points).
    """
    n = len(points)
    chosen = [int(rng.integers(n))]

    for _ in range(1, k):
        nearest = pairwise_distances(points, points[chosen]).min(axis=1)
        weights = nearest ** 2
        cumulative = np.cumsum(weights)
        target = rng.random() * cumulative[-1]
        # First point whose running total reaches the target; with all
        # weights zero this is point 0.
        idx = int(np.searchsorted(cumulative, target, side="left"))
        chosen.append(min(idx, n - 1))

    return points[chosen].copy()


class ClusterTrainer:
    """
    K-means trainer over (voltage, current, power) windows.

    Attributes:
        k (int): Number of clusters.
        max_iterations (int): Upper bound on Lloyd iterations.
        rng (np.random.Generator): Random source for seeding.
    """

    def __init__(self, k: int = None, max_iterations: int = None,
                 rng: np.random.Generator = None):
        """
        Args:
            k: Number of clusters. Defaults to config.K_CLUSTERS (4).
            max_iterations: Defaults to config.MAX_ITERATIONS (100).
            rng: Random source.  Defaults to a Generator seeded with
                config.RANDOM_STATE (nondeterministic when unset).
        """
        self.k = k or config.K_CLUSTERS
        self.max_iterations = max_iterations or config.MAX_ITERATIONS
        self.rng = rng if rng is not None else np.random.default_rng(config.RANDOM_STATE)

    def train(self, history) -> TrainingResult:
        """
        Run one full training pass over a window snapshot.

        Args:
            history: Sequence of Sample objects.

        Returns:
            TrainingResult; empty if len(history) < k.
        """
        if len(history) < self.k:
            logger.debug(f"Skipping training: {len(history)} samples < k={self.k}")
            return _empty_result()

        raw = samples_to_array(history)
        normalizer = FeatureNormalizer()
        points = normalizer.fit_transform(raw)

        centroids = kmeans_plus_plus(points, self.k, self.rng)
        assignments = np.zeros(len(points), dtype=np.int64)

        iterations = 0
        for _ in range(self.max_iterations):
            iterations += 1
            new_assignments = pairwise_distances(points, centroids).argmin(axis=1)

            if np.array_equal(new_assignments, assignments):
                break
            assignments = new_assignments

            for c in range(self.k):
                members = points[assignments == c]
                if len(members) > 0:
                    centroids[c] = members.mean(axis=0)

        result = TrainingResult(
            centroids=normalizer.inverse_transform(centroids),
            assignments=assignments,
        )
        logger.info(f"Trained {self.k} clusters on {len(points)} samples "
                    f"in {iterations} iterations "
                    f"(counts={result.counts(self.k).tolist()})")
        return result
