"""
service.py — Analytics HTTP Service (Flask)
============================================

Lightweight HTTP surface for dashboards and for ingest bridges that cannot
speak MQTT.  The engine never pushes notifications: consumers poll /status
or read the response of each /process call.

Endpoints:
    GET  /health   — Service health check
    POST /process  — Push one telemetry payload through the engine
    GET  /status   — Latest z-score result, learning state, load validation
    GET  /summary  — Session energy summary and power status timeline
    POST /control  — Publish a power switch command { "power": "ON"|"OFF" }
    POST /reset    — Start a new session (empty window, COLLECTING)

Run:
    python -m backend.analytics.service
    # Starts on port 5050 by default (ANALYTICS_SERVICE_PORT env var)
"""

import logging
from datetime import datetime, timezone

from flask import Flask, request, jsonify

from . import config
from . import pipeline
from .feature_engineering import summarize_session, power_status_timeline
from .inference import InferenceEngine
from .load_validation import validate_load, voltage_status, current_status
from .telemetry import Sample
from .utils import setup_logging, result_to_dict

logger = logging.getLogger("analytics.service")


def create_app(engine: InferenceEngine = None) -> Flask:
    """
    Build the Flask app around an analytics engine.

    Args:
        engine: Engine to serve.  Defaults to the pipeline singleton, so
            MQTT ingestion and HTTP share one window.
    """
    engine = engine or pipeline.get_engine()
    app = Flask(__name__)

    @app.route("/health", methods=["GET"])
    def health():
        """Health check endpoint."""
        return jsonify({
            "status": "OK",
            "service": "Energy Analytics Engine",
        })

    @app.route("/process", methods=["POST"])
    def process():
        """
        Process one telemetry payload.

        Expects JSON body in the meter format:
            { voltage, current, power, currentLoss, monthlyPower, timestamp }
        """
        data = request.get_json(force=True, silent=True)
        if not data or not isinstance(data, dict):
            return jsonify({"error": "No JSON body provided"}), 400

        try:
            sample = Sample.from_payload(data, timestamp=datetime.now(timezone.utc))
        except ValueError as e:
            return jsonify({"error": str(e)}), 400

        result = engine.process(sample)
        return jsonify({
            "status": "processed",
            **result_to_dict(result),
        })

    @app.route("/status", methods=["GET"])
    def status():
        """Latest analytics results for polling consumers."""
        latest = engine.latest
        return jsonify({
            "state": engine.state,
            "latest": latest.to_dict() if latest else None,
            "anomaly": engine.anomaly.to_dict(),
            "learning": engine.learning_state.to_dict(),
            "load": validate_load(latest),
            "metrics": {
                "voltage": voltage_status(latest),
                "current": current_status(latest),
            },
        })

    @app.route("/summary", methods=["GET"])
    def summary():
        """Energy consumed/lost and outage timeline over the current window."""
        samples = engine.snapshot()
        return jsonify({
            "summary": summarize_session(samples),
            "timeline": power_status_timeline(samples),
        })

    @app.route("/control", methods=["POST"])
    def control():
        """Publish a power switch command to the meter."""
        data = request.get_json(force=True, silent=True) or {}
        power = str(data.get("power", "")).upper()
        if power not in ("ON", "OFF"):
            return jsonify({"error": "Expected {\"power\": \"ON\" | \"OFF\"}"}), 400

        if not pipeline.set_power(power == "ON"):
            return jsonify({"status": "failed", "power": power}), 503
        return jsonify({"status": "sent", "power": power})

    @app.route("/reset", methods=["POST"])
    def reset():
        """Start a new analytics session."""
        engine.reset()
        return jsonify({"status": "reset", "state": engine.state})

    return app


if __name__ == "__main__":
    setup_logging()
    logger.info(f"Starting analytics service on port {config.SERVICE_PORT}")
    create_app().run(host="0.0.0.0", port=config.SERVICE_PORT, debug=False)
