"""
feature_engineering.py — Window Feature Extraction and Session Summary
=======================================================================

Turns a window of Sample objects into the structures the analytics use:

    samples_to_array      — (n, 3) float matrix [voltage, current, power]
                            consumed by the trainer and classifier
    samples_to_dataframe  — pandas DataFrame of the full payload fields
    summarize_session     — energy consumed / lost and power loss duration
    power_status_timeline — per-sample ON/OFF status

Session summary (per window, Δt = config.SAMPLE_INTERVAL_SECONDS):
    consumed_wh      — Σ power · Δt
    lost_wh          — Σ current_loss · Δt
    power_loss_count — samples where the power loss guard fires
    power_loss_seconds — power_loss_count · Δt
    monthly_kwh      — latest meter month-to-date reading
"""

import logging
import numpy as np
import pandas as pd

from . import config

logger = logging.getLogger("analytics.feature_engineering")


def samples_to_array(samples) -> np.ndarray:
    """
    Convert samples to the clustering feature matrix.

    The column order must match config.FEATURE_NAMES.

    Args:
        samples: Sequence of Sample objects.

    Returns:
        2-D numpy array of shape (n_samples, 3).
    """
    if len(samples) == 0:
        return np.empty((0, len(config.FEATURE_NAMES)), dtype=np.float64)
    return np.array([[s.voltage, s.current, s.power] for s in samples],
                    dtype=np.float64)


def samples_to_dataframe(samples) -> pd.DataFrame:
    """
    Convert samples to a DataFrame with one row per sample.

    Columns: voltage, current, power, current_loss, monthly_power, timestamp,
    power_loss (bool).
    """
    columns = ["voltage", "current", "power", "current_loss",
               "monthly_power", "timestamp"]
    df = pd.DataFrame(
        [[s.voltage, s.current, s.power, s.current_loss,
          s.monthly_power, s.timestamp] for s in samples],
        columns=columns,
    )
    df["power_loss"] = ((df["voltage"] < config.POWER_LOSS_VOLTAGE)
                        | (df["current"] < config.POWER_LOSS_CURRENT))
    return df


def summarize_session(samples, interval_seconds: float = None) -> dict:
    """
    Summarize energy flow and outages over a window of samples.

    Args:
        samples: Sequence of Sample objects (oldest first).
        interval_seconds: Sample spacing.  Defaults to
            config.SAMPLE_INTERVAL_SECONDS.

    Returns:
        Dict with consumed_wh, lost_wh, power_loss_count,
        power_loss_seconds, monthly_kwh and samples.
    """
    interval_seconds = interval_seconds or config.SAMPLE_INTERVAL_SECONDS
    interval_hours = interval_seconds / 3600.0

    if len(samples) == 0:
        return {
            "samples": 0,
            "consumed_wh": 0.0,
            "lost_wh": 0.0,
            "power_loss_count": 0,
            "power_loss_seconds": 0.0,
            "monthly_kwh": None,
        }

    df = samples_to_dataframe(samples)
    power_loss_count = int(df["power_loss"].sum())

    summary = {
        "samples": len(df),
        "consumed_wh": round(float(df["power"].sum() * interval_hours), 2),
        "lost_wh": round(float(df["current_loss"].sum() * interval_hours), 2),
        "power_loss_count": power_loss_count,
        "power_loss_seconds": float(power_loss_count * interval_seconds),
        "monthly_kwh": float(df["monthly_power"].iloc[-1]),
    }
    logger.debug(f"Session summary: {summary}")
    return summary


def power_status_timeline(samples) -> list[dict]:
    """
    Per-sample power status for an outage timeline.

    Returns:
        List of dicts: { timestamp (ISO-8601), status ("ON"/"OFF"), power }.
    """
    if len(samples) == 0:
        return []
    df = samples_to_dataframe(samples)
    return [
        {
            "timestamp": row.timestamp.isoformat(),
            "status": "OFF" if row.power_loss else "ON",
            "power": float(row.power),
        }
        for row in df.itertuples(index=False)
    ]
