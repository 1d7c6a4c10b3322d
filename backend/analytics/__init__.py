"""
backend.analytics — Streaming Analytics for Household Energy Telemetry
=======================================================================

This package implements the analytics engine behind the energy monitor
dashboard.

Architecture:
    ESP32 Meter → MQTT (home/energy/realtime) → Python Analytics Service
                                                       ↓
                                               Analytics Engine:
                                                 1. Rolling Sample Window (60)
                                                 2. Power Loss Guard
                                                 3. Z-Score Anomaly Detector
                                                 4. K-Means Behaviour Learning (K=4, ≥30 samples)
                                                 5. Cluster Labelling
                                                 6. Nearest-Centroid Classification
                                                       ↓
                                       ZScoreResult + LearningState (polled via HTTP)

Modules:
    config              — Thresholds and system constants
    telemetry           — Sample and result value types
    windowing           — Count-based rolling sample window
    load_validation     — Power loss guard and rated-range checks
    anomaly             — Z-score anomaly detector
    preprocessing       — Per-channel min-max normalization
    feature_engineering — Feature matrix and session energy summary
    model               — K-means++ cluster trainer
    labeling            — Rule-based cluster names
    classifier          — Live cluster assignment and anomaly score
    inference           — Orchestrating engine (single entry point)
    pipeline            — MQTT connector and power switch publisher
    simulator           — Synthetic meter telemetry
    service             — Flask HTTP service
    utils               — Logging setup and serialization helpers
"""

__version__ = "1.0.0"
__author__ = "Energy Monitoring IoT Team"
