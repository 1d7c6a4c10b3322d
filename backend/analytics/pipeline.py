"""
pipeline.py — MQTT-to-Analytics Pipeline Connector
===================================================

Bridges the ESP32 meter's MQTT telemetry to the analytics engine, and
publishes power switch commands back to the meter's relay.

Flow:
    MQTT home/energy/realtime message -> on_message()
    -> process_incoming_telemetry() -> Sample.from_payload()
    -> InferenceEngine.process() -> latest results cached on the engine

    set_power(on) -> publish home/energy/control { "power": "ON" | "OFF" }

Run as a standalone listener:
    python -m backend.analytics.pipeline
"""

import json
import logging
from datetime import datetime, timezone

import paho.mqtt.client as mqtt

from . import config
from .inference import InferenceEngine
from .telemetry import Sample, ABNORMAL

logger = logging.getLogger("analytics.pipeline")

# Singleton engine and publisher client (initialized on first use)
_engine = None
_mqtt_client = None


def get_engine() -> InferenceEngine:
    """Get or create the singleton InferenceEngine."""
    global _engine
    if _engine is None:
        _engine = InferenceEngine()
    return _engine


def _get_mqtt_client():
    """
    Get or create the MQTT client used for publishing control commands.
    Returns None if the broker is unreachable.
    """
    global _mqtt_client
    if _mqtt_client is not None:
        return _mqtt_client

    try:
        client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2,
                             client_id="energy-analytics-control")
        client.connect(config.MQTT_BROKER_HOST, config.MQTT_BROKER_PORT,
                       config.MQTT_KEEPALIVE)
        client.loop_start()
        _mqtt_client = client
        logger.info(
            f"MQTT client connected to {config.MQTT_BROKER_HOST}:"
            f"{config.MQTT_BROKER_PORT}"
        )
        return client
    except OSError as e:
        logger.error(f"MQTT connection failed: {e}")
        return None


def decode_payload(payload: bytes) -> dict:
    """
    Decode a raw MQTT message body.

    Raises:
        ValueError: If the body is not a JSON object.
    """
    data = json.loads(payload.decode("utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def process_incoming_telemetry(data: dict,
                               engine: InferenceEngine = None) -> dict | None:
    """
    Main entry point: push one telemetry payload through the engine.

    The sample is stamped with its receipt time, as the meter's own clock
    is not trusted.

    Args:
        data: Decoded telemetry payload.
        engine: Engine to feed.  Defaults to the module singleton.

    Returns:
        Engine result dict, or None if the payload was rejected.
    """
    engine = engine or get_engine()
    try:
        sample = Sample.from_payload(data, timestamp=datetime.now(timezone.utc))
    except ValueError as e:
        logger.warning(f"Dropping malformed telemetry: {e}")
        return None

    logger.debug(f"Processing telemetry: {sample}")
    result = engine.process(sample)

    learning = result["learning"]
    if result["anomaly"].label == ABNORMAL:
        logger.warning(
            f"Statistical anomaly: confidence={result['anomaly'].confidence:.0f}% "
            f"z={result['anomaly'].z_scores}"
        )
    if not learning.is_learning:
        logger.debug(f"Cluster {learning.current_cluster} "
                     f"anomaly_score={learning.anomaly_score:.1f}")
    return result


def set_power(on: bool) -> bool:
    """
    Publish a power switch command to the meter's relay.

    Args:
        on: True to energize the load, False to cut it.

    Returns:
        True if the command was handed to the broker.
    """
    client = _get_mqtt_client()
    if client is None:
        logger.warning("Cannot publish power command — no MQTT client")
        return False

    payload = json.dumps({"power": "ON" if on else "OFF"})
    info = client.publish(config.MQTT_CONTROL_TOPIC, payload, qos=1)
    if info.rc != mqtt.MQTT_ERR_SUCCESS:
        logger.error(f"Failed to publish power command: rc={info.rc}")
        return False

    logger.info(f"Power command published: topic={config.MQTT_CONTROL_TOPIC} "
                f"payload={payload}")
    return True


def _on_connect(client, userdata, flags, reason_code, properties):
    if reason_code.is_failure:
        logger.error(f"MQTT connect refused: {reason_code}")
        return
    logger.info("Connected to MQTT broker")
    client.subscribe(config.MQTT_REALTIME_TOPIC)


def _on_message(client, userdata, msg):
    if msg.topic != config.MQTT_REALTIME_TOPIC:
        return
    try:
        data = decode_payload(msg.payload)
    except ValueError as e:
        # json.JSONDecodeError and UnicodeDecodeError are ValueErrors
        logger.error(f"Failed to parse MQTT message: {e}")
        return
    process_incoming_telemetry(data, engine=userdata)


def run_listener(engine: InferenceEngine = None) -> None:
    """
    Subscribe to the realtime topic and feed the engine until interrupted.
    """
    engine = engine or get_engine()
    client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2,
                         client_id="energy-analytics-listener",
                         userdata=engine)
    client.on_connect = _on_connect
    client.on_message = _on_message
    client.reconnect_delay_set(min_delay=1, max_delay=5)

    logger.info(f"Connecting to {config.MQTT_BROKER_HOST}:{config.MQTT_BROKER_PORT} "
                f"topic={config.MQTT_REALTIME_TOPIC}")
    client.connect(config.MQTT_BROKER_HOST, config.MQTT_BROKER_PORT,
                   config.MQTT_KEEPALIVE)
    try:
        client.loop_forever()
    except KeyboardInterrupt:
        logger.info("Listener stopped")
    finally:
        client.disconnect()


if __name__ == "__main__":
    from .utils import setup_logging

    setup_logging()
    run_listener()
