"""
preprocessing.py — Per-Channel Min-Max Normalization
=====================================================

Voltage (~230 V), current (~2.5 A) and power (~600 W) live on very different
scales.  Before clustering, each channel is rescaled independently to [0, 1]
over the current window so that all three contribute equally to distances:

    normalized = (value − min) / (max − min)

A channel with zero range (every sample identical) uses divisor 1, so its
normalized values are all 0 rather than NaN.  The fitted min/max are kept so
that centroids found in normalized space can be mapped back to volts, amps
and watts.

The scaler is refitted on every training pass; nothing is persisted.
"""

import logging
import numpy as np
from sklearn.preprocessing import MinMaxScaler

logger = logging.getLogger("analytics.preprocessing")


class FeatureNormalizer:
    """
    Wraps scikit-learn's MinMaxScaler for the (voltage, current, power)
    feature matrix.

    MinMaxScaler already replaces a zero data range with 1, which gives the
    required behaviour for constant channels.

    Attributes:
        scaler (MinMaxScaler): Underlying scaler, range (0, 1).
    """

    def __init__(self):
        self.scaler = MinMaxScaler(feature_range=(0.0, 1.0))
        self._is_fitted = False

    def fit(self, features: np.ndarray) -> "FeatureNormalizer":
        """
        Capture per-channel min and max.

        Args:
            features: 2-D array of shape (n_samples, 3).

        Returns:
            self (for method chaining).
        """
        self.scaler.fit(features)
        self._is_fitted = True
        logger.debug(f"Normalizer fitted: min={self.scaler.data_min_.tolist()} "
                     f"max={self.scaler.data_max_.tolist()}")
        return self

    def transform(self, features: np.ndarray) -> np.ndarray:
        """
        Map raw features into [0, 1] per channel.

        Raises:
            RuntimeError: If called before fit().
        """
        self._check_fitted()
        return self.scaler.transform(features)

    def fit_transform(self, features: np.ndarray) -> np.ndarray:
        self.fit(features)
        return self.transform(features)

    def inverse_transform(self, normalized: np.ndarray) -> np.ndarray:
        """
        Map normalized points (e.g. centroids) back to original units.

        Args:
            normalized: 2-D array of shape (n_points, 3).

        Returns:
            Array in volts / amps / watts, clipped to the fitted
            per-channel [min, max].

        Raises:
            RuntimeError: If called before fit().
        """
        self._check_fitted()
        restored = self.scaler.inverse_transform(normalized)
        # Float round-off can land an ulp outside the observed range
        return np.clip(restored, self.data_min, self.data_max)

    @property
    def data_min(self) -> np.ndarray:
        self._check_fitted()
        return self.scaler.data_min_

    @property
    def data_max(self) -> np.ndarray:
        self._check_fitted()
        return self.scaler.data_max_

    def _check_fitted(self) -> None:
        if not self._is_fitted:
            raise RuntimeError(
                "Normalizer has not been fitted yet. Call fit() first."
            )
