"""
Conveyor Belt
=============

Waste collection actuator.

The belt is a two-state machine (IDLE, ACTIVE) whose state is read and
written under a lock. Power draw is a pure function of the state.

process_item() dwells for a fixed simulated time while polling the
state, so a stop() issued from another thread ends the dwell within one
poll interval. The belt never returns to IDLE on its own; the
controller calls stop() or the next item reuses the ACTIVE state.
"""

import logging
import threading
from typing import Optional

from aquatic_monitor.core.clock import Clock, SystemClock
from aquatic_monitor.models.detection import DetectionRecord
from aquatic_monitor.models.state import ConveyorState


logger = logging.getLogger(__name__)


class ConveyorBelt:
    """
    Thread-safe collection conveyor.

    Attributes:
        power_usage_w: Draw while ACTIVE
        dwell_seconds: Simulated handling time per item
        poll_interval_seconds: How often the dwell checks for stop()
    """

    def __init__(
        self,
        power_usage_w: float = 150.0,
        speed_m_s: float = 0.5,
        dwell_seconds: float = 2.0,
        poll_interval_seconds: float = 0.1,
        clock: Optional[Clock] = None,
    ) -> None:
        if power_usage_w < 0:
            raise ValueError("power_usage_w must be non-negative")
        if dwell_seconds < 0:
            raise ValueError("dwell_seconds must be non-negative")
        if poll_interval_seconds <= 0:
            raise ValueError("poll_interval_seconds must be positive")

        self.power_usage_w = power_usage_w
        self.speed_m_s = speed_m_s
        self.dwell_seconds = dwell_seconds
        self.poll_interval_seconds = poll_interval_seconds
        self._clock = clock or SystemClock()

        self._state = ConveyorState.IDLE
        self._lock = threading.Lock()
        self._items_processed: int = 0
        self._items_interrupted: int = 0

    @property
    def state(self) -> ConveyorState:
        with self._lock:
            return self._state

    @property
    def items_processed(self) -> int:
        with self._lock:
            return self._items_processed

    @property
    def items_interrupted(self) -> int:
        with self._lock:
            return self._items_interrupted

    def activate(self) -> None:
        with self._lock:
            self._state = ConveyorState.ACTIVE

    def stop(self) -> None:
        with self._lock:
            self._state = ConveyorState.IDLE

    def is_active(self) -> bool:
        with self._lock:
            return self._state == ConveyorState.ACTIVE

    def power_draw(self) -> float:
        with self._lock:
            return self.power_usage_w if self._state == ConveyorState.ACTIVE else 0.0

    def process_item(self, record: DetectionRecord) -> bool:
        """
        Carry one waste item to the collection bin.

        Args:
            record: Waste detection to collect

        Returns:
            True if the full dwell completed, False if it was interrupted
            by stop() or failed
        """
        try:
            with self._lock:
                if self._state == ConveyorState.IDLE:
                    self._state = ConveyorState.ACTIVE

            logger.info(f"Processing {record.label} ({record.size:.1f} cm)")

            start = self._clock.now()
            while (self._clock.now() - start).total_seconds() < self.dwell_seconds:
                self._clock.sleep(self.poll_interval_seconds)
                if not self.is_active():
                    with self._lock:
                        self._items_interrupted += 1
                    logger.info(f"Collection of {record.label} interrupted by stop")
                    return False

            with self._lock:
                self._items_processed += 1
            logger.info("Waste deposited in collection bin")
            return True

        except Exception as e:
            logger.error(f"Conveyor error while processing {record.label}: {e}")
            return False

    def get_metrics(self) -> dict:
        with self._lock:
            return {
                "state": self._state.value,
                "items_processed": self._items_processed,
                "items_interrupted": self._items_interrupted,
                "power_usage_w": self.power_usage_w,
            }
