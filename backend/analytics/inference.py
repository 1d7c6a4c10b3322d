"""
inference.py — Real-Time Analytics Engine (Orchestrator)
=========================================================

Single point of entry for every new telemetry sample.  For each sample:

    window.push -> snapshot -> z-score label
                -> (≥ MIN_SAMPLES) full retrain -> label clusters -> classify

States:
    COLLECTING — fewer than MIN_SAMPLES in the window.  is_learning=True,
                 no clusters, no training attempted.
    TRAINED    — MIN_SAMPLES or more.  Every new sample triggers a retrain
                 from scratch and a fresh classification.  Stays TRAINED
                 until reset() clears the window.

All work for one sample happens under one lock, on one immutable snapshot,
so MQTT callbacks and HTTP requests arriving on different threads are
applied strictly one at a time in arrival order.
"""

import logging
import threading
from typing import Optional

from . import config
from .anomaly import ZScoreAnomalyDetector
from .classifier import ClusterClassifier
from .labeling import label_centroid, cluster_color
from .model import ClusterTrainer
from .telemetry import (
    Centroid, Cluster, LearningState, Sample, ZScoreResult, POWER_LOSS,
)
from .windowing import SampleWindow

logger = logging.getLogger("analytics.inference")

# Engine states
COLLECTING = "COLLECTING"
TRAINED = "TRAINED"


class InferenceEngine:
    """
    Streaming analytics engine for one monitored load.

    Orchestrates: window -> z-score detector -> k-means trainer
    -> labelling -> nearest-centroid classifier.

    Usage:
        engine = InferenceEngine()
        result = engine.process(sample)
        result["anomaly"].label, result["learning"].current_cluster
    """

    def __init__(self, window: SampleWindow = None,
                 detector: ZScoreAnomalyDetector = None,
                 trainer: ClusterTrainer = None,
                 classifier: ClusterClassifier = None,
                 min_samples: int = None):
        self.window = window or SampleWindow()
        self.detector = detector or ZScoreAnomalyDetector()
        self.trainer = trainer or ClusterTrainer()
        self.classifier = classifier or ClusterClassifier()
        self.min_samples = min_samples or config.MIN_SAMPLES
        self._lock = threading.Lock()
        self._state = COLLECTING
        self._anomaly = self.detector.evaluate(None, ())
        self._learning = self._collecting_state(0)

    def process(self, sample: Sample) -> dict:
        """
        Ingest one sample and recompute every derived result.

        Args:
            sample: Newly received telemetry sample.

        Returns:
            Dict with keys:
                anomaly: ZScoreResult for this sample
                learning: LearningState after this sample
                state: COLLECTING | TRAINED
        """
        with self._lock:
            self.window.push(sample)
            snapshot = self.window.snapshot()

            anomaly = self.detector.evaluate(sample, snapshot)
            if anomaly.label == POWER_LOSS:
                logger.warning(f"Power loss: voltage={sample.voltage} "
                               f"current={sample.current}")

            if len(snapshot) < self.min_samples:
                learning = self._collecting_state(len(snapshot))
            else:
                learning = self._learn(sample, snapshot)

            self._anomaly = anomaly
            self._learning = learning

            return {
                "anomaly": anomaly,
                "learning": learning,
                "state": self._state,
            }

    def _learn(self, latest: Sample, snapshot: tuple) -> LearningState:
        result = self.trainer.train(snapshot)
        if result.is_empty:
            return self._collecting_state(len(snapshot))

        if self._state == COLLECTING:
            logger.info(f"Collected {len(snapshot)} samples — "
                        f"behaviour learning active")
            self._state = TRAINED

        counts = result.counts(len(result.centroids))
        clusters = []
        for idx, row in enumerate(result.centroids):
            centroid = Centroid(voltage=float(row[0]), current=float(row[1]),
                                power=float(row[2]))
            clusters.append(Cluster(
                id=idx,
                centroid=centroid,
                label=label_centroid(centroid),
                color=cluster_color(idx),
                count=int(counts[idx]),
            ))

        classification = self.classifier.classify(latest, result.centroids, snapshot)

        return LearningState(
            clusters=clusters,
            current_cluster=classification.cluster_id,
            anomaly_score=classification.anomaly_score,
            is_learning=False,
            samples_collected=len(snapshot),
            min_samples=self.min_samples,
        )

    def _collecting_state(self, collected: int) -> LearningState:
        return LearningState(
            clusters=[],
            current_cluster=None,
            anomaly_score=0.0,
            is_learning=True,
            samples_collected=collected,
            min_samples=self.min_samples,
        )

    @property
    def anomaly(self) -> ZScoreResult:
        """Latest z-score result (POWER_LOSS before any sample)."""
        with self._lock:
            return self._anomaly

    @property
    def learning_state(self) -> LearningState:
        """Latest behaviour learning state."""
        with self._lock:
            return self._learning

    @property
    def state(self) -> str:
        return self._state

    @property
    def latest(self) -> Optional[Sample]:
        with self._lock:
            return self.window.latest

    def snapshot(self) -> tuple:
        """Consistent copy of the current window."""
        with self._lock:
            return self.window.snapshot()

    def reset(self) -> None:
        """
        Start a new session: empty the window and drop all results.
        """
        with self._lock:
            self.window.reset()
            self._state = COLLECTING
            self._anomaly = self.detector.evaluate(None, ())
            self._learning = self._collecting_state(0)
        logger.info("Analytics engine reset to COLLECTING")
