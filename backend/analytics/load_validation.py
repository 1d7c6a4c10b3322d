"""
load_validation.py — Power Loss Guard and Load Range Validation
================================================================

Rule-based checks on a single sample, evaluated before any statistics:

Power loss guard:
    A sample with voltage < POWER_LOSS_VOLTAGE or current < POWER_LOSS_CURRENT
    is de-energized.  This overrides every other label.

Load validation states:
    VALID       — Voltage and current both inside their rated ranges.
    INVALID     — Energized, but at least one channel is out of range.
    POWER_LOSS  — No sample, or the power loss guard fired.

Metric status (per channel, for dashboards):
    success — inside the rated range
    warning — energized but out of range
    danger  — no sample or de-energized
"""

import logging
from typing import Optional

from . import config
from .telemetry import Sample

logger = logging.getLogger("analytics.load_validation")

# Load validation states
VALID = "valid"
INVALID = "invalid"
POWER_LOSS = "power_loss"

# Metric statuses
SUCCESS = "success"
WARNING = "warning"
DANGER = "danger"


def is_power_loss(sample: Optional[Sample]) -> bool:
    """
    Power loss guard.

    Args:
        sample: Latest sample, or None when nothing has been received.

    Returns:
        True if the load should be treated as de-energized.
    """
    if sample is None:
        return True
    return (sample.voltage < config.POWER_LOSS_VOLTAGE
            or sample.current < config.POWER_LOSS_CURRENT)


def _in_range(value: float, bounds: tuple) -> bool:
    low, high = bounds
    return low <= value <= high


def validate_load(sample: Optional[Sample]) -> dict:
    """
    Check the latest sample against the rated voltage and current ranges.

    Args:
        sample: Latest sample, or None.

    Returns:
        Dict with keys:
            status: valid | invalid | power_loss
            voltage_valid (bool)
            current_valid (bool)
            message (str)
    """
    if sample is None:
        return {
            "status": POWER_LOSS,
            "voltage_valid": False,
            "current_valid": False,
            "message": "No data received",
        }

    if is_power_loss(sample):
        return {
            "status": POWER_LOSS,
            "voltage_valid": False,
            "current_valid": False,
            "message": "Power Loss Detected",
        }

    voltage_valid = _in_range(sample.voltage, config.VALID_VOLTAGE_RANGE)
    current_valid = _in_range(sample.current, config.VALID_CURRENT_RANGE)

    if voltage_valid and current_valid:
        return {
            "status": VALID,
            "voltage_valid": True,
            "current_valid": True,
            "message": "Load within valid range",
        }

    logger.debug(f"Load out of range: voltage={sample.voltage} "
                 f"current={sample.current}")
    return {
        "status": INVALID,
        "voltage_valid": voltage_valid,
        "current_valid": current_valid,
        "message": "Load outside valid range",
    }


def voltage_status(sample: Optional[Sample]) -> str:
    """Dashboard status for the voltage channel."""
    if sample is None or sample.voltage < config.POWER_LOSS_VOLTAGE:
        return DANGER
    if not _in_range(sample.voltage, config.VALID_VOLTAGE_RANGE):
        return WARNING
    return SUCCESS


def current_status(sample: Optional[Sample]) -> str:
    """Dashboard status for the current channel."""
    if sample is None or sample.current < config.POWER_LOSS_CURRENT:
        return DANGER
    if not _in_range(sample.current, config.VALID_CURRENT_RANGE):
        return WARNING
    return SUCCESS
