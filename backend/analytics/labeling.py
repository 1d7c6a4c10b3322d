"""
labeling.py — Semantic Names for Learned Clusters
==================================================

K-means only returns anonymous centroids.  Each centroid is named by a fixed
rule set, checked in order:

    power   < 100 W  → "Low Load"
    power   > 500 W  → "High Load"
    voltage < 200 V  → "Undervoltage"
    otherwise        → "Normal Operation"

Every centroid gets one of these four names; the positional colour table in
config only supplies the dashboard swatch.
"""

from . import config


def label_centroid(centroid) -> str:
    """
    Name a centroid by its power and voltage.

    Args:
        centroid: Object with `power` and `voltage` attributes
            (original units).

    Returns:
        One of "Low Load", "High Load", "Undervoltage", "Normal Operation".
    """
    if centroid.power < config.LOW_LOAD_POWER:
        return "Low Load"
    if centroid.power > config.HIGH_LOAD_POWER:
        return "High Load"
    if centroid.voltage < config.UNDERVOLTAGE_VOLTAGE:
        return "Undervoltage"
    return "Normal Operation"


def cluster_color(index: int) -> str:
    return config.CLUSTER_COLORS[index % len(config.CLUSTER_COLORS)]
