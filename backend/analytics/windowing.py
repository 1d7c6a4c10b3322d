"""
windowing.py — Count-Based Rolling Sample Window
=================================================

Holds the most recent telemetry samples for the analytics engine.

How it works:
    1. Each incoming Sample is appended to a bounded deque.
    2. Once the deque holds config.WINDOW_CAPACITY samples, every new
       append evicts the oldest sample (FIFO).
    3. Readers never see the deque itself: snapshot() hands out an
       immutable tuple so a single evaluation pass (z-score, training,
       classification) works on one consistent view.

Why count-based?
    The meter publishes on a fixed cadence and every consumer downstream
    (baseline statistics, minimum-sample gate, chronological averages) is
    defined in terms of sample counts, not wall-clock spans.
"""

import logging
from collections import deque
from typing import Optional

from . import config
from .telemetry import Sample

logger = logging.getLogger("analytics.windowing")


class SampleWindow:
    """
    Bounded, insertion-ordered buffer of recent samples.

    push() is the only mutator.  Insertion order is significant: it defines
    the baseline for z-scores and the order of anomaly-score averaging.

    Attributes:
        capacity (int): Maximum number of samples retained.
        _buffer (deque[Sample]): Internal sample buffer.
    """

    def __init__(self, capacity: int = None):
        """
        Args:
            capacity: Maximum samples retained.
                Defaults to config.WINDOW_CAPACITY (60).
        """
        self.capacity = capacity or config.WINDOW_CAPACITY
        self._buffer: deque = deque(maxlen=self.capacity)

    def push(self, sample: Sample) -> None:
        """
        Append a sample, evicting the oldest one when the window is full.

        Args:
            sample: Newly received telemetry sample.
        """
        evicting = len(self._buffer) == self.capacity
        self._buffer.append(sample)
        logger.debug(f"Window size: {len(self._buffer)}/{self.capacity}"
                     f"{' (evicted oldest)' if evicting else ''}")

    def snapshot(self) -> tuple:
        """
        Return an immutable, oldest-first view of the current contents.

        Returns:
            Tuple of Sample objects.
        """
        return tuple(self._buffer)

    @property
    def latest(self) -> Optional[Sample]:
        """Most recently pushed sample, or None if the window is empty."""
        return self._buffer[-1] if self._buffer else None

    def __len__(self) -> int:
        return len(self._buffer)

    def reset(self) -> None:
        """
        Clear the window entirely.

        Used when the session is restarted by the ingestion side.
        """
        self._buffer.clear()
        logger.info("Sample window reset")
