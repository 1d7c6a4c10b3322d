"""
utils.py — Shared Utility Functions and Logging Setup
======================================================

Common helpers used across the analytics modules.
"""

import logging

from . import config


def setup_logging(level: str = None) -> None:
    """
    Configure structured logging for the analytics engine.

    Sets up a console handler with timestamp, logger name, level,
    and message. All analytics.* loggers inherit this configuration.

    Args:
        level: Log level string (DEBUG/INFO/WARNING/ERROR/CRITICAL).
               Defaults to config.LOG_LEVEL.
    """
    level = level or config.LOG_LEVEL
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(name)s] %(levelname)s — %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    analytics_logger = logging.getLogger("analytics")
    analytics_logger.setLevel(numeric_level)

    # Avoid duplicate handlers on repeated calls
    if not analytics_logger.handlers:
        analytics_logger.addHandler(handler)


def result_to_dict(result: dict) -> dict:
    """
    Convert an InferenceEngine.process() result into JSON-ready primitives.

    Args:
        result: Dict with 'anomaly' (ZScoreResult), 'learning'
            (LearningState) and 'state'.

    Returns:
        Nested dict of plain Python types.
    """
    return {
        "state": result["state"],
        "anomaly": result["anomaly"].to_dict(),
        "learning": result["learning"].to_dict(),
    }
