"""
config.py — Analytics Engine Configuration Constants
=====================================================

Centralizes all thresholds, model sizes, and transport settings used by the
energy telemetry analytics engine. Tuning these values adjusts how sensitive
the z-score detector is and how much history the behaviour learner needs.

The monitored load is a single household circuit metered by an ESP32:
- Voltage (V RMS)
- Current (A RMS)
- Active power (W)
- Telemetry arrives every ~5 seconds via MQTT
"""

import os

# ═══════════════════════════════════════════════════════════════════
# SAMPLE WINDOW CONFIGURATION
# ═══════════════════════════════════════════════════════════════════

# Maximum number of samples kept in the rolling window.
# 60 samples at the nominal 5 s interval = 5 minutes of history.
WINDOW_CAPACITY = 60

# Nominal interval between telemetry samples (seconds).  Only used to
# convert sample counts into durations and energy (Wh) estimates.
SAMPLE_INTERVAL_SECONDS = 5

# ═══════════════════════════════════════════════════════════════════
# POWER LOSS GUARD
# ═══════════════════════════════════════════════════════════════════

# A sample below either threshold is treated as de-energized and
# short-circuits every statistical check.
POWER_LOSS_VOLTAGE = 10.0
POWER_LOSS_CURRENT = 0.1

# ═══════════════════════════════════════════════════════════════════
# Z-SCORE ANOMALY DETECTION
# ═══════════════════════════════════════════════════════════════════

# |z| above which the latest sample is labelled ABNORMAL.
Z_SCORE_THRESHOLD = 2.5

# ═══════════════════════════════════════════════════════════════════
# BEHAVIOUR LEARNING (K-MEANS)
# ═══════════════════════════════════════════════════════════════════

# Samples required in the window before clustering is attempted.
# 30 samples = 2.5 minutes of telemetry.
MIN_SAMPLES = 30

# Number of behaviour clusters learned from the window.
K_CLUSTERS = 4

# Upper bound on Lloyd iterations per training pass.
MAX_ITERATIONS = 100

# Seed for the k-means++ random source.  Unset means a fresh,
# nondeterministic seed per engine.
_seed = os.environ.get("CLUSTER_RANDOM_SEED")
RANDOM_STATE = int(_seed) if _seed else None

# ═══════════════════════════════════════════════════════════════════
# CLUSTER LABELLING RULES
# ═══════════════════════════════════════════════════════════════════

LOW_LOAD_POWER = 100.0
HIGH_LOAD_POWER = 500.0
UNDERVOLTAGE_VOLTAGE = 200.0

# Positional swatch colours; names come from the labelling rules.
CLUSTER_COLORS = [
    "hsl(145 65% 42%)",
    "hsl(38 92% 50%)",
    "hsl(220 90% 56%)",
    "hsl(280 65% 60%)",
    "hsl(0 72% 51%)",
]

# ═══════════════════════════════════════════════════════════════════
# LOAD VALIDATION RANGES
# ═══════════════════════════════════════════════════════════════════

VALID_VOLTAGE_RANGE = (230.0, 240.0)
VALID_CURRENT_RANGE = (2.0, 3.0)

# ═══════════════════════════════════════════════════════════════════
# MQTT TRANSPORT
# ═══════════════════════════════════════════════════════════════════

MQTT_BROKER_HOST = os.environ.get("MQTT_BROKER_HOST", "localhost")
MQTT_BROKER_PORT = int(os.environ.get("MQTT_BROKER_PORT", "1883"))
MQTT_KEEPALIVE = 60

# Telemetry published by the ESP32 meter.
MQTT_REALTIME_TOPIC = os.environ.get("MQTT_REALTIME_TOPIC", "home/energy/realtime")

# Power switch commands consumed by the ESP32 relay.
MQTT_CONTROL_TOPIC = os.environ.get("MQTT_CONTROL_TOPIC", "home/energy/control")

# ═══════════════════════════════════════════════════════════════════
# HTTP SERVICE
# ═══════════════════════════════════════════════════════════════════

SERVICE_PORT = int(os.environ.get("ANALYTICS_SERVICE_PORT", "5050"))

# ═══════════════════════════════════════════════════════════════════
# LOGGING
# ═══════════════════════════════════════════════════════════════════

# Log level for the analytics engine (DEBUG, INFO, WARNING, ERROR, CRITICAL)
LOG_LEVEL = os.environ.get("ANALYTICS_LOG_LEVEL", "INFO")

# Feature channels used for clustering, in matrix column order.
FEATURE_NAMES = ["voltage", "current", "power"]
