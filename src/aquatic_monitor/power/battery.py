"""
Battery Model
=============

Energy store integrating solar income and activity costs over time.

Invariants:
    - 0 ≤ current_charge_wh ≤ capacity_wh at all times
    - discharge() is all-or-nothing: it either deducts exactly
      power × hours and returns True, or leaves the charge untouched
      and returns False
    - charge() never fails; power above max_charge_rate_w and energy
      above capacity are discarded

All mutating and reading operations hold a single lock, so the loop
thread and a stopping thread can never observe or produce a partial
update.
"""

import logging
import threading


logger = logging.getLogger(__name__)


class Battery:
    """
    Thread-safe rechargeable battery.

    Attributes:
        capacity_wh: Usable capacity in Wh
        max_charge_rate_w: Maximum power accepted while charging

    Example:
        battery = Battery(capacity_wh=500.0, max_charge_rate_w=100.0)
        battery.charge(power_w=50.0, hours=1.0)
        if battery.discharge(power_w=15.0, hours=0.05):
            run_camera()
    """

    def __init__(
        self,
        capacity_wh: float = 500.0,
        max_charge_rate_w: float = 100.0,
        initial_charge_fraction: float = 0.7,
    ) -> None:
        """
        Initialize battery.

        Args:
            capacity_wh: Capacity in Wh. Must be positive.
            max_charge_rate_w: Charge power limit in W. Must be positive.
            initial_charge_fraction: Starting charge as a fraction of capacity, in [0, 1].
        """
        if capacity_wh <= 0:
            raise ValueError("capacity_wh must be positive")
        if max_charge_rate_w <= 0:
            raise ValueError("max_charge_rate_w must be positive")
        if not 0 <= initial_charge_fraction <= 1:
            raise ValueError("initial_charge_fraction must be in [0, 1]")

        self._capacity_wh = capacity_wh
        self._max_charge_rate_w = max_charge_rate_w
        self._current_charge_wh = capacity_wh * initial_charge_fraction
        self._lock = threading.Lock()

        self._failed_discharges: int = 0

        logger.info(
            f"Battery initialized: capacity={capacity_wh}Wh, "
            f"max_rate={max_charge_rate_w}W, charge={self._current_charge_wh:.1f}Wh"
        )

    @property
    def capacity_wh(self) -> float:
        return self._capacity_wh

    @property
    def max_charge_rate_w(self) -> float:
        return self._max_charge_rate_w

    @property
    def current_charge_wh(self) -> float:
        with self._lock:
            return self._current_charge_wh

    @property
    def failed_discharges(self) -> int:
        """Number of discharge requests refused for lack of energy."""
        with self._lock:
            return self._failed_discharges

    def charge(self, power_w: float, hours: float) -> float:
        """
        Add energy from a power source.

        Args:
            power_w: Offered power in W (clamped to max_charge_rate_w)
            hours: Duration in hours

        Returns:
            Energy actually stored, in Wh
        """
        if power_w <= 0 or hours <= 0:
            return 0.0

        energy = min(power_w, self._max_charge_rate_w) * hours
        with self._lock:
            before = self._current_charge_wh
            self._current_charge_wh = min(self._capacity_wh, before + energy)
            return self._current_charge_wh - before

    def discharge(self, power_w: float, hours: float) -> bool:
        """
        Atomically withdraw power × hours if it is available.

        Args:
            power_w: Load power in W
            hours: Duration in hours

        Returns:
            True if the energy was deducted, False if the charge was insufficient
        """
        energy_needed = max(0.0, power_w) * max(0.0, hours)
        with self._lock:
            if energy_needed <= self._current_charge_wh:
                self._current_charge_wh -= energy_needed
                return True
            self._failed_discharges += 1

        logger.debug(
            f"Discharge refused: needed={energy_needed:.4f}Wh "
            f"({power_w}W x {hours}h)"
        )
        return False

    def charge_percentage(self) -> float:
        with self._lock:
            return 100.0 * self._current_charge_wh / self._capacity_wh

    def get_metrics(self) -> dict:
        """Get battery metrics for observability."""
        with self._lock:
            return {
                "capacity_wh": self._capacity_wh,
                "current_charge_wh": round(self._current_charge_wh, 4),
                "charge_percent": round(100.0 * self._current_charge_wh / self._capacity_wh, 2),
                "max_charge_rate_w": self._max_charge_rate_w,
                "failed_discharges": self._failed_discharges,
            }
