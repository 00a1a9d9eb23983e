"""
Control Loop
============

Energy-aware scheduler for the floating platform.

The Controller owns the solar panel, battery and conveyor, and holds
handles to the detection source, image store and event sink. It ticks
once per ``tick_seconds`` while it has not been stopped and the battery
is above the critical threshold.

Tick Order:
    1. Elapsed time since the last tick, env sample and detection
    2. Day/night flag → sunlight curve → solar output → battery charge
    3. Environmental sample (gated by sensor energy)
    4. Detection cycle (gated by camera + processing energy), then
       waste collection (gated by the collection threshold)
    5. Status report

Timer Rules:
    Each timer advances only on the tick where its action ran. A
    refused discharge leaves the timer where it was, so the action is
    retried on the next tick.

Threading:
    run() executes on the loop thread. stop() may be called from any
    thread; it only sets an Event and idles the conveyor, and the loop
    observes it at the next iteration boundary.
"""

import logging
import random
import threading
from datetime import datetime, timedelta
from typing import List, Optional

from aquatic_monitor.actuation.conveyor import ConveyorBelt
from aquatic_monitor.control.policy import ControlPolicy
from aquatic_monitor.core.clock import Clock, SystemClock
from aquatic_monitor.detection.images import ImageStore, NullImageStore
from aquatic_monitor.detection.source import DetectionSource
from aquatic_monitor.errors import ImageNotFoundError
from aquatic_monitor.models.detection import DetectionKind, DetectionRecord
from aquatic_monitor.models.readings import EnvironmentalReading, ReadingSource
from aquatic_monitor.models.state import OperatingMode, ShutdownReason
from aquatic_monitor.models.status import StatusReport
from aquatic_monitor.observability.event_sink import EventSink
from aquatic_monitor.power.battery import Battery
from aquatic_monitor.power.solar import SolarPanel, is_daytime, sunlight_intensity


logger = logging.getLogger(__name__)


def _hours_between(earlier: datetime, later: datetime) -> float:
    return max(0.0, (later - earlier).total_seconds() / 3600.0)


def _fractional_hour(when: datetime) -> float:
    return when.hour + when.minute / 60.0 + when.second / 3600.0


class Controller:
    """
    Energy-aware control loop.

    Attributes:
        solar: Solar panel model
        battery: Energy store
        conveyor: Waste collection actuator
        source: Cyclic detection source
        sink: Operator event log
        policy: Timing, costs and thresholds
        tick_count: Ticks completed

    Example:
        controller = Controller(solar, battery, conveyor, source, sink)
        thread = threading.Thread(target=controller.run)
        thread.start()
        ...
        controller.stop()
        thread.join()
    """

    def __init__(
        self,
        solar: SolarPanel,
        battery: Battery,
        conveyor: ConveyorBelt,
        source: DetectionSource,
        sink: EventSink,
        image_store: Optional[ImageStore] = None,
        clock: Optional[Clock] = None,
        policy: Optional[ControlPolicy] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.solar = solar
        self.battery = battery
        self.conveyor = conveyor
        self.source = source
        self.sink = sink
        self.image_store = image_store or NullImageStore()
        self.policy = (policy or ControlPolicy()).validate()
        self._clock = clock or SystemClock()
        self._rng = rng or random.Random()

        self._stop_requested = threading.Event()
        self._loop_active = threading.Event()
        self._shutdown_lock = threading.Lock()
        self._shutdown_logged = False

        now = self._clock.now()
        self.last_tick_time: datetime = now
        self.last_detection_time: datetime = now
        self.last_env_reading_time: datetime = now
        self.last_status_time: datetime = now

        self.last_marine_records: List[DetectionRecord] = []
        self.last_waste_records: List[DetectionRecord] = []
        self.last_env_reading: Optional[EnvironmentalReading] = None

        self.tick_count: int = 0
        self.error_count: int = 0

        logger.info(
            f"Controller initialized: tick={self.policy.tick_seconds}s, "
            f"env={self.policy.env_interval_hours:.4f}h, "
            f"detection={self.policy.detection_interval_hours:.4f}h, "
            f"status={self.policy.status_interval_hours:.4f}h"
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def initialize(self) -> bool:
        self.sink.emit("System initialized")
        return True

    @property
    def is_running(self) -> bool:
        """True while run() is executing its loop."""
        return self._loop_active.is_set()

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested.is_set()

    def _above_critical(self) -> bool:
        return self.battery.charge_percentage() > self.policy.critical_shutdown_percent

    def run(self) -> ShutdownReason:
        """
        Run the loop until stopped or the battery reaches the critical level.

        Returns:
            Why the loop exited
        """
        self._loop_active.set()
        self.sink.emit("Starting marine life and waste monitoring system")

        now = self._clock.now()
        self.last_tick_time = now
        self.last_detection_time = now
        self.last_env_reading_time = now
        self.last_status_time = now

        try:
            while not self._stop_requested.is_set() and self._above_critical():
                tick_started = self._clock.now()
                try:
                    self.tick()
                    boundary = tick_started + timedelta(seconds=self.policy.tick_seconds)
                    remaining = (boundary - self._clock.now()).total_seconds()
                    self._clock.sleep(max(0.0, remaining))
                except Exception as e:
                    self.error_count += 1
                    logger.exception("Unhandled error during tick")
                    self.sink.emit(f"ERROR in main loop: {e}")
                    self._clock.sleep(self.policy.error_backoff_seconds)
        finally:
            self._loop_active.clear()

        if not self._above_critical():
            self.sink.emit(
                f"CRITICAL: Battery level below {self.policy.critical_shutdown_percent:g}% "
                f"- initiating shutdown"
            )
            self.conveyor.stop()
            return ShutdownReason.CRITICAL_BATTERY

        return ShutdownReason.STOPPED

    def stop(self) -> None:
        """Request loop exit and idle the conveyor. Never blocks on the loop."""
        self._stop_requested.set()
        self.conveyor.stop()

        with self._shutdown_lock:
            if self._shutdown_logged:
                return
            self._shutdown_logged = True
        self.sink.emit("System shutdown complete")

    # =========================================================================
    # Tick
    # =========================================================================

    def tick(self) -> None:
        """Perform one scheduling step."""
        now = self._clock.now()
        p = self.policy

        tick_hours = _hours_between(self.last_tick_time, now)
        env_hours = _hours_between(self.last_env_reading_time, now)
        detection_hours = _hours_between(self.last_detection_time, now)
        status_hours = _hours_between(self.last_status_time, now)

        # Charging always precedes any discharge in the same tick
        hour = _fractional_hour(now)
        self.solar.set_daytime(is_daytime(now.hour))
        self.solar.update(
            sunlight_intensity(hour, p.sunlight_base_w_m2, p.sunlight_amplitude_w_m2)
        )
        self.battery.charge(self.solar.current_output_w, tick_hours)
        self.last_tick_time = now

        if env_hours >= p.env_interval_hours:
            if self._sample_environment():
                self.last_env_reading_time = now

        if detection_hours >= p.detection_interval_hours:
            if self._run_detection_cycle():
                self.last_detection_time = now

        if status_hours >= p.status_interval_hours:
            self.sink.emit(self.status_report(now).to_line())
            self.last_status_time = now

        self.tick_count += 1

    # =========================================================================
    # Actions
    # =========================================================================

    def _sample_environment(self) -> bool:
        p = self.policy
        if not self.battery.discharge(p.sensor_power_w, p.sensor_duration_hours):
            self.sink.emit("Low battery - skipping environmental sampling")
            return False

        reading = self.source.next_environmental_reading()
        self.last_env_reading = reading

        suffix = " [fallback]" if reading.source == ReadingSource.FALLBACK else ""
        self.sink.emit(f"Environmental Data: {reading.describe()}{suffix}")

        if reading.ph < p.ph_min or reading.ph > p.ph_max:
            self.sink.emit("WARNING: Critical pH level detected!")
        if reading.turbidity > p.turbidity_max_ntu:
            self.sink.emit("WARNING: High turbidity detected!")
        return True

    def _capture_frame(self) -> bool:
        """
        Load the image behind the next detection.

        The side to image is picked at random; an empty side falls back
        to the other one. Returns False when the image is unavailable.
        """
        kinds = [DetectionKind.MARINE, DetectionKind.WASTE]
        self._rng.shuffle(kinds)

        for kind in kinds:
            image_ref = self.source.current_image_ref(kind)
            if image_ref is None:
                continue
            try:
                self.image_store.load(image_ref)
                return True
            except ImageNotFoundError as e:
                logger.warning(str(e))
                self.sink.emit(f"Image not available ({image_ref}) - no detection this cycle")
                return False

        # Both collections empty: nothing to image, the cycle still reports
        return True

    def _run_detection_cycle(self) -> bool:
        p = self.policy
        if not self.battery.discharge(p.detection_power_w, p.detection_duration_hours):
            self.sink.emit("Low battery - skipping detection cycle")
            return False

        if not self._capture_frame():
            # Energy was spent; nothing observed this cycle
            return True

        marine, waste = self.source.next_detections()

        if marine:
            self.sink.emit("Marine Life Detected:")
            for detection in marine:
                self.sink.emit(f"-> {detection.describe()}")

        if waste:
            self.sink.emit("Waste Detected:")
            for detection in waste:
                self.sink.emit(f"-> {detection.describe()}")
                self._collect(detection)
            if self.conveyor.is_active():
                self.conveyor.stop()

        if not marine and not waste:
            self.sink.emit("No objects detected")

        self.last_marine_records = marine
        self.last_waste_records = waste
        return True

    def _collect(self, detection: DetectionRecord) -> None:
        p = self.policy
        if self.battery.charge_percentage() <= p.collection_threshold_percent:
            self.sink.emit("Low battery - skipping waste collection")
            return

        if self._stop_requested.is_set():
            logger.info(f"Stop requested - not collecting {detection.label}")
            return

        self.conveyor.process_item(detection)
        if not self.battery.discharge(self.conveyor.power_draw(), p.collection_duration_hours):
            logger.warning(f"Insufficient energy to account for collecting {detection.label}")

    # =========================================================================
    # Reporting
    # =========================================================================

    def status_report(self, now: Optional[datetime] = None) -> StatusReport:
        return StatusReport(
            timestamp=now or self._clock.now(),
            solar_output_w=self.solar.current_output_w,
            battery_percent=self.battery.charge_percentage(),
            mode=OperatingMode.DAY if self.solar.is_daytime else OperatingMode.NIGHT,
            last_marine=list(self.last_marine_records),
            last_waste=list(self.last_waste_records),
            last_reading=self.last_env_reading,
        )

    def get_metrics(self) -> dict:
        return {
            "tick_count": self.tick_count,
            "error_count": self.error_count,
            "running": self.is_running,
            "battery": self.battery.get_metrics(),
            "solar": self.solar.get_metrics(),
            "conveyor": self.conveyor.get_metrics(),
            "source": self.source.get_metrics(),
        }
