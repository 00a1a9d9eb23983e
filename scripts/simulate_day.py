#!/usr/bin/env python3
"""
Accelerated Day Simulation
==========================

Standalone script that drives the controller on a ManualClock, so a
full day of operation completes in seconds.

This script:
    1. Builds the controller from config.yaml (or --config)
    2. Starts the virtual clock at --start-hour
    3. Ticks through --hours of simulated time
    4. Logs battery and solar state every --report-hours
    5. Reports a final summary

Usage:
    python scripts/simulate_day.py
    python scripts/simulate_day.py --hours 48 --start-hour 18 --tick 30
"""

import argparse
import logging
import os
import sys
from datetime import datetime, timedelta

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from aquatic_monitor.config import load_config
from aquatic_monitor.core.clock import ManualClock
from aquatic_monitor.main import build_controller
from aquatic_monitor.observability import EventSink


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)


def run_simulation(
    config_path: str,
    hours: float,
    start_hour: int,
    tick_seconds: float,
    report_hours: float,
    event_log: str,
) -> dict:
    """
    Run the simulation.

    Args:
        config_path: Path to config.yaml (None = default search)
        hours: Simulated hours to run
        start_hour: Hour of day the virtual clock starts at
        tick_seconds: Simulated seconds per tick
        report_hours: Simulated hours between progress reports
        event_log: File for the operator event log

    Returns:
        Final metrics dict
    """
    settings = load_config(config_path)
    settings.schedule.tick_seconds = tick_seconds

    start = datetime.now().replace(hour=start_hour, minute=0, second=0, microsecond=0)
    clock = ManualClock(start)
    end = start + timedelta(hours=hours)

    logger.info("=" * 60)
    logger.info("Accelerated Day Simulation")
    logger.info("=" * 60)
    logger.info(f"Start: {start:%Y-%m-%d %H:%M}")
    logger.info(f"Simulated hours: {hours}")
    logger.info(f"Tick: {tick_seconds} s")
    logger.info(f"Event log: {event_log}")
    logger.info("=" * 60)

    with EventSink(event_log, console=None, clock=clock) as sink:
        controller = build_controller(settings, sink, clock=clock)
        controller.initialize()
        critical = controller.policy.critical_shutdown_percent
        next_report = start + timedelta(hours=report_hours)
        min_percent = controller.battery.charge_percentage()

        while clock.now() < end:
            if controller.battery.charge_percentage() <= critical:
                logger.warning(f"Battery at or below {critical:g}% - ending simulation early")
                break

            controller.tick()
            clock.sleep(tick_seconds)
            min_percent = min(min_percent, controller.battery.charge_percentage())

            if clock.now() >= next_report:
                logger.info("-" * 40)
                logger.info(f"Simulated time: {clock.now():%Y-%m-%d %H:%M}")
                logger.info(f"  Battery: {controller.battery.charge_percentage():.2f}%")
                logger.info(f"  Solar output: {controller.solar.current_output_w:.2f} W")
                logger.info(f"  Items collected: {controller.conveyor.items_processed}")
                next_report += timedelta(hours=report_hours)

        controller.stop()
        metrics = controller.get_metrics()

    logger.info("=" * 60)
    logger.info("FINAL SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Ticks: {metrics['tick_count']}")
    logger.info(f"Final battery: {metrics['battery']['charge_percent']:.2f}%")
    logger.info(f"Lowest battery: {min_percent:.2f}%")
    logger.info(f"Failed discharges: {metrics['battery']['failed_discharges']}")
    logger.info(f"Items collected: {metrics['conveyor']['items_processed']}")
    logger.info(f"Events written: {sink.lines_written}")
    logger.info("=" * 60)

    metrics["min_battery_percent"] = min_percent
    metrics["reached_end"] = clock.now() >= end
    return metrics


def main():
    parser = argparse.ArgumentParser(
        description="Simulate the aquatic monitor over accelerated time"
    )
    parser.add_argument("--config", type=str, default=None, help="Path to config.yaml")
    parser.add_argument(
        "--hours",
        type=float,
        default=24.0,
        help="Simulated hours (default: 24)",
    )
    parser.add_argument(
        "--start-hour",
        type=int,
        default=0,
        choices=range(24),
        metavar="HOUR",
        help="Hour of day to start at (default: 0)",
    )
    parser.add_argument(
        "--tick",
        type=float,
        default=10.0,
        help="Simulated seconds per tick (default: 10)",
    )
    parser.add_argument(
        "--report-hours",
        type=float,
        default=2.0,
        help="Simulated hours between progress reports (default: 2)",
    )
    parser.add_argument(
        "--event-log",
        type=str,
        default="simulation_log.txt",
        help="Event log file (default: simulation_log.txt)",
    )

    args = parser.parse_args()

    result = run_simulation(
        config_path=args.config,
        hours=args.hours,
        start_hour=args.start_hour,
        tick_seconds=args.tick,
        report_hours=args.report_hours,
        event_log=args.event_log,
    )

    # Non-zero exit if the battery ran out before the end
    sys.exit(0 if result["reached_end"] else 1)


if __name__ == "__main__":
    main()
