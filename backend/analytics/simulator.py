"""
simulator.py — Synthetic Meter Telemetry
=========================================

Stands in for the ESP32 meter during development and demos.

Each generated payload matches the meter's MQTT format:
    { voltage, current, power, currentLoss, monthlyPower, timestamp }

Distribution:
    - 5 % power loss: voltage in [0, 5) V, current in [0, 0.05) A
    - otherwise voltage ≈ 230 ± 10 V, current ≈ 2.5 ± 0.75 A
    - 10 % of energized samples are invalid-load excursions: voltage at
      220–225 V or 245–255 V, current at 1.0–1.8 A or 3.2–3.7 A
    - power = voltage · current; loss 2–5 % of power; monthly 150–200 kWh

Run:
    python -m backend.analytics.simulator --samples 90 --seed 7
"""

import argparse
import logging
import time
from datetime import datetime, timedelta, timezone

import numpy as np

from . import config
from .inference import InferenceEngine
from .telemetry import Sample

logger = logging.getLogger("analytics.simulator")


def generate_sample(rng: np.random.Generator, timestamp_ms: int = None) -> dict:
    """
    Generate one synthetic telemetry payload.

    Args:
        rng: Random source.
        timestamp_ms: Epoch milliseconds. Defaults to now.

    Returns:
        Payload dict in the meter's format.
    """
    is_power_loss = rng.random() < 0.05

    if is_power_loss:
        voltage = rng.random() * 5
        current = rng.random() * 0.05
    else:
        voltage = 230 + (rng.random() - 0.5) * 20
        current = 2.5 + (rng.random() - 0.5) * 1.5

        if rng.random() < 0.1:
            voltage = (220 + rng.random() * 5 if rng.random() > 0.5
                       else 245 + rng.random() * 10)
            current = (1 + rng.random() * 0.8 if rng.random() > 0.5
                       else 3.2 + rng.random() * 0.5)

    power = voltage * current
    current_loss = 0.0 if is_power_loss else power * (0.02 + rng.random() * 0.03)
    monthly_power = 150 + rng.random() * 50

    if timestamp_ms is None:
        timestamp_ms = int(datetime.now(timezone.utc).timestamp() * 1000)

    return {
        "voltage": round(voltage, 2),
        "current": round(current, 3),
        "power": round(power, 2),
        "currentLoss": round(current_loss, 2),
        "monthlyPower": round(monthly_power, 2),
        "timestamp": timestamp_ms,
    }


def simulate_stream(n: int, rng: np.random.Generator = None,
                    start: datetime = None) -> list[dict]:
    """
    Generate a back-dated stream of n payloads at the nominal interval.

    Args:
        n: Number of payloads.
        rng: Random source. Defaults to an unseeded Generator.
        start: Timestamp of the first payload.  Defaults to
            now − n · interval.

    Returns:
        List of payload dicts, oldest first.
    """
    rng = rng or np.random.default_rng()
    step = timedelta(seconds=config.SAMPLE_INTERVAL_SECONDS)
    start = start or datetime.now(timezone.utc).replace(microsecond=0) - n * step
    return [
        generate_sample(rng, int((start + i * step).timestamp() * 1000))
        for i in range(n)
    ]


def main(argv=None, engine: InferenceEngine = None) -> int:
    from .utils import setup_logging

    parser = argparse.ArgumentParser(description="Feed synthetic telemetry "
                                                 "through the analytics engine")
    parser.add_argument("--samples", type=int, default=90)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--interval", type=float, default=0.0,
                        help="Seconds to sleep between samples")
    args = parser.parse_args(argv)

    setup_logging()
    rng = np.random.default_rng(args.seed)
    engine = engine or InferenceEngine()

    # Samples keep the back-dated payload timestamps (5 s apart), so the
    # receipt-stamping MQTT entry point is bypassed.
    for payload in simulate_stream(args.samples, rng):
        result = engine.process(Sample.from_payload(payload))
        learning = result["learning"]
        logger.info(
            f"{result['anomaly'].label:<10} conf={result['anomaly'].confidence:5.1f}% "
            f"state={result['state']} cluster={learning.current_cluster} "
            f"score={learning.anomaly_score:5.1f}"
        )
        if args.interval:
            time.sleep(args.interval)

    for cluster in engine.learning_state.clusters:
        logger.info(f"Cluster {cluster.id}: {cluster.label:<16} n={cluster.count} "
                    f"V={cluster.centroid.voltage:.1f} I={cluster.centroid.current:.2f} "
                    f"P={cluster.centroid.power:.1f}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
