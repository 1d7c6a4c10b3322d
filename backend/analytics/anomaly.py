"""
anomaly.py — Z-Score Anomaly Detector
======================================

Labels the latest sample against the statistics of the current window.

Procedure:
    1. Power loss guard: no sample, voltage < 10 V or current < 0.1 A
       → POWER_LOSS with confidence 100.  Nothing else is computed.
    2. Per channel (voltage, current, power): population mean and standard
       deviation (divide by N) over the window.
    3. z = (value − mean) / std, or 0 when the window has fewer than two
       samples or the channel's std is 0.
    4. maxZ = max |z|.  Above the threshold (2.5) the sample is ABNORMAL,
       otherwise NORMAL.

Confidence:
    ABNORMAL: min(100, (maxZ / threshold) * 50 + 50)
    NORMAL:   max(0, 100 − (maxZ / threshold) * 50)

The window passed in as history already contains the latest sample, so the
baseline includes the value being scored.  This pulls z-scores slightly
toward zero and is kept that way.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from . import config
from .load_validation import is_power_loss
from .telemetry import Sample, ZScoreResult, NORMAL, ABNORMAL, POWER_LOSS

logger = logging.getLogger("analytics.anomaly")


def calculate_z_score(value: float, data: Sequence[float]) -> float:
    """
    Z-score of `value` against the population statistics of `data`.

    Args:
        value: Observation to score.
        data: Baseline observations.

    Returns:
        (value − mean) / std, or 0.0 if len(data) < 2 or std == 0.
    """
    if len(data) < 2:
        return 0.0
    arr = np.asarray(data, dtype=np.float64)
    # A constant channel must score 0 even when the float mean is inexact
    if arr.max() == arr.min():
        return 0.0
    std = float(arr.std(ddof=0))
    if std == 0:
        return 0.0
    return float((value - arr.mean()) / std)


class ZScoreAnomalyDetector:
    """
    Per-channel z-score detector with a power loss short circuit.

    Attributes:
        threshold (float): |z| above which a sample is ABNORMAL.
    """

    def __init__(self, threshold: float = None):
        """
        Args:
            threshold: Z-score threshold. Defaults to config.Z_SCORE_THRESHOLD.
        """
        self.threshold = threshold or config.Z_SCORE_THRESHOLD

    def evaluate(self, current: Optional[Sample],
                 history: Sequence[Sample]) -> ZScoreResult:
        """
        Label the current sample against the window.

        Args:
            current: Latest sample, or None if nothing has been received.
            history: Window snapshot (oldest first, including `current`).

        Returns:
            ZScoreResult with label, per-channel z-scores and confidence.
        """
        if is_power_loss(current):
            logger.debug("Power loss guard fired")
            return ZScoreResult(
                label=POWER_LOSS,
                z_scores={"voltage": 0.0, "current": 0.0, "power": 0.0},
                confidence=100.0,
            )

        z_scores = {
            "voltage": calculate_z_score(current.voltage, [s.voltage for s in history]),
            "current": calculate_z_score(current.current, [s.current for s in history]),
            "power": calculate_z_score(current.power, [s.power for s in history]),
        }
        max_z = max(abs(z) for z in z_scores.values())
        ratio = max_z / self.threshold

        if max_z > self.threshold:
            confidence = min(100.0, ratio * 50 + 50)
            logger.warning(
                f"ABNORMAL sample: max|z|={max_z:.2f} "
                f"(voltage={z_scores['voltage']:.2f}, "
                f"current={z_scores['current']:.2f}, "
                f"power={z_scores['power']:.2f})"
            )
            return ZScoreResult(label=ABNORMAL, z_scores=z_scores,
                                confidence=_clamp(confidence))

        confidence = max(0.0, 100 - ratio * 50)
        return ZScoreResult(label=NORMAL, z_scores=z_scores,
                            confidence=_clamp(confidence))


def _clamp(value: float) -> float:
    return float(min(100.0, max(0.0, value)))
