"""
Aquatic Monitor Main Application
================================

Process entry point for the floating aquatic monitor.

Startup:
    1. Load configuration (YAML + environment)
    2. Open the event log (fatal if unavailable)
    3. Load datasets, build power, actuation and detection components
    4. Start the control loop on its own thread

Shutdown:
    The main thread waits for the configured run duration, SIGINT or
    SIGTERM, or the loop exiting on its own (critical battery). It then
    calls Controller.stop() and joins the loop thread.

Exit Codes:
    0 - clean shutdown
    1 - configuration error, event log unavailable, or startup failure

Usage:
    aquatic-monitor
    aquatic-monitor --config ./config.yaml --duration 600
    python -m aquatic_monitor.main
"""

import argparse
import logging
import random
import signal
import sys
import threading
import time
from typing import List, Optional

import yaml
from pydantic import ValidationError

from aquatic_monitor.actuation import ConveyorBelt
from aquatic_monitor.config import Settings, load_config, setup_logging
from aquatic_monitor.control import ControlPolicy, Controller
from aquatic_monitor.core.clock import Clock, SystemClock
from aquatic_monitor.detection import (
    CsvDatasetProvider,
    DetectionSource,
    FileImageStore,
    ImageStore,
    NullImageStore,
)
from aquatic_monitor.errors import EventSinkError
from aquatic_monitor.observability import EventSink
from aquatic_monitor.power import Battery, SolarPanel


logger = logging.getLogger(__name__)

# How often the main thread checks for loop exit while waiting
_WAIT_SLICE_SECONDS = 0.25


# =============================================================================
# Component Factories
# =============================================================================

def build_policy(settings: Settings) -> ControlPolicy:
    """Translate settings into the controller's policy."""
    return ControlPolicy(
        tick_seconds=settings.schedule.tick_seconds,
        error_backoff_seconds=settings.schedule.error_backoff_seconds,
        env_interval_hours=settings.schedule.env_interval_hours,
        detection_interval_hours=settings.schedule.detection_interval_hours,
        status_interval_hours=settings.schedule.status_interval_hours,
        sensor_power_w=settings.power.sensor_power_w,
        sensor_duration_hours=settings.schedule.sensor_duration_hours,
        camera_power_w=settings.power.camera_power_w,
        processing_power_w=settings.power.processing_power_w,
        detection_duration_hours=settings.schedule.detection_duration_hours,
        collection_duration_hours=settings.schedule.collection_duration_hours,
        collection_threshold_percent=settings.thresholds.collection_percent,
        critical_shutdown_percent=settings.thresholds.critical_percent,
        ph_min=settings.thresholds.ph_min,
        ph_max=settings.thresholds.ph_max,
        turbidity_max_ntu=settings.thresholds.turbidity_max_ntu,
        sunlight_base_w_m2=settings.power.solar.sunlight_base_w_m2,
        sunlight_amplitude_w_m2=settings.power.solar.sunlight_amplitude_w_m2,
    ).validate()


def create_image_store(settings: Settings) -> ImageStore:
    """FileImageStore when an image directory is configured, else NullImageStore."""
    if settings.datasets.image_root:
        logger.info(f"Using FileImageStore: root={settings.datasets.image_root}")
        return FileImageStore(settings.datasets.image_root)

    logger.info("No image directory configured, using NullImageStore")
    return NullImageStore()


def build_controller(
    settings: Settings,
    sink: EventSink,
    clock: Optional[Clock] = None,
    rng: Optional[random.Random] = None,
) -> Controller:
    """Assemble the controller and its components from settings."""
    clock = clock or SystemClock()
    if rng is None:
        rng = random.Random(settings.system.random_seed)

    provider = CsvDatasetProvider(
        waste_path=settings.datasets.waste_path,
        marine_path=settings.datasets.marine_path,
    )
    source = DetectionSource.from_provider(provider, clock=clock, rng=rng)
    if provider.skipped_rows:
        logger.warning(f"{provider.skipped_rows} dataset rows were skipped")

    solar = SolarPanel(
        efficiency=settings.power.solar.efficiency,
        area_m2=settings.power.solar.area_m2,
    )
    battery = Battery(
        capacity_wh=settings.power.battery.capacity_wh,
        max_charge_rate_w=settings.power.battery.max_charge_rate_w,
        initial_charge_fraction=settings.power.battery.initial_charge_fraction,
    )
    conveyor = ConveyorBelt(
        power_usage_w=settings.conveyor.power_usage_w,
        speed_m_s=settings.conveyor.speed_m_s,
        dwell_seconds=settings.conveyor.dwell_seconds,
        poll_interval_seconds=settings.conveyor.poll_interval_seconds,
        clock=clock,
    )

    return Controller(
        solar=solar,
        battery=battery,
        conveyor=conveyor,
        source=source,
        sink=sink,
        image_store=create_image_store(settings),
        clock=clock,
        policy=build_policy(settings),
        rng=rng,
    )


# =============================================================================
# Run
# =============================================================================

def run_until_stopped(
    controller: Controller,
    duration_seconds: float,
    stop_event: threading.Event,
) -> bool:
    """
    Run the loop thread and stop it after the duration or on request.

    Args:
        controller: Controller to run
        duration_seconds: Seconds before stopping (0 = no limit)
        stop_event: External shutdown trigger (e.g. set by a signal handler)

    Returns:
        True if the loop thread exited without an unhandled exception
    """
    failures: List[BaseException] = []

    def _loop() -> None:
        try:
            reason = controller.run()
            logger.info(f"Control loop exited: {reason.value}")
        except Exception as e:
            failures.append(e)
            logger.exception("Control loop thread crashed")

    thread = threading.Thread(target=_loop, name="control-loop", daemon=True)
    thread.start()

    deadline = time.monotonic() + duration_seconds if duration_seconds > 0 else None
    while thread.is_alive() and not stop_event.is_set():
        if deadline is not None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.info("Run duration elapsed")
                break
            stop_event.wait(min(remaining, _WAIT_SLICE_SECONDS))
        else:
            stop_event.wait(_WAIT_SLICE_SECONDS)

    controller.stop()
    thread.join()
    return not failures


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Solar-powered floating waste collector and marine life monitor",
    )
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Seconds to run before stopping (0 = until SIGINT/SIGTERM)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point. Returns the process exit code."""
    args = _parse_args(argv)

    try:
        settings = load_config(args.config)
    except (ValidationError, yaml.YAMLError, OSError, ValueError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(settings)
    logger.info(f"Starting {settings.system.name} {settings.system.version}")

    duration = args.duration if args.duration is not None else settings.system.run_duration_seconds

    try:
        sink = EventSink(
            settings.event_log.path,
            console=sys.stdout if settings.event_log.console else None,
        )
    except EventSinkError as e:
        logger.error(str(e))
        return 1

    with sink:
        try:
            controller = build_controller(settings, sink)
        except Exception as e:
            logger.exception("Startup failed")
            sink.emit(f"Startup failed: {e}")
            return 1

        if not controller.initialize():
            logger.error("Failed to initialize monitoring system")
            return 1

        stop_event = threading.Event()
        previous_handlers = {}

        def _handle_signal(signum, frame):
            logger.info(f"Received signal {signum}, initiating graceful shutdown...")
            stop_event.set()

        if threading.current_thread() is threading.main_thread():
            for signum in (signal.SIGINT, signal.SIGTERM):
                previous_handlers[signum] = signal.signal(signum, _handle_signal)

        try:
            clean = run_until_stopped(controller, duration, stop_event)
        finally:
            for signum, handler in previous_handlers.items():
                signal.signal(signum, handler)

    logger.info("Shutdown complete")
    return 0 if clean else 1


if __name__ == "__main__":
    sys.exit(main())
