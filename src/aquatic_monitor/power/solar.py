"""
Solar Panel Model
=================

Converts a sunlight intensity signal into instantaneous output power.

The panel's output is a pure function of the last ``update`` input and
the daytime flag at the time of that call:

    output_w = intensity × area × efficiency   (daytime)
    output_w = 0                                (night)

The synthetic sunlight curve used by the control loop is a half-sine
over daylight hours, peaking at local noon:

    intensity(h) = base + amplitude × sin((h − 6) × π / 12),  6 ≤ h < 18
    intensity(h) = 0                                         otherwise
"""

import logging
import math


logger = logging.getLogger(__name__)

DAY_START_HOUR = 6
DAY_END_HOUR = 18


def is_daytime(hour: float) -> bool:
    """True for local hours in [6, 18)."""
    return DAY_START_HOUR <= hour < DAY_END_HOUR


def sunlight_intensity(
    hour: float,
    base_w_m2: float = 500.0,
    amplitude_w_m2: float = 300.0,
) -> float:
    """
    Synthetic irradiance for a local (fractional) hour.

    Args:
        hour: Local time of day in hours, e.g. 13.5 for 13:30
        base_w_m2: Irradiance at the edges of the daylight window
        amplitude_w_m2: Additional irradiance at noon

    Returns:
        Irradiance in W/m², zero outside daylight
    """
    if not is_daytime(hour):
        return 0.0
    return base_w_m2 + amplitude_w_m2 * math.sin((hour - DAY_START_HOUR) * math.pi / 12.0)


class SolarPanel:
    """
    Photovoltaic panel with fixed area and efficiency.

    Attributes:
        efficiency: Conversion efficiency in (0, 1]
        area_m2: Panel area in m²
    """

    def __init__(self, efficiency: float = 0.20, area_m2: float = 0.75) -> None:
        if not 0 < efficiency <= 1:
            raise ValueError("efficiency must be in (0, 1]")
        if area_m2 <= 0:
            raise ValueError("area_m2 must be positive")

        self.efficiency = efficiency
        self.area_m2 = area_m2
        self._current_output_w: float = 0.0
        self._is_daytime: bool = True

        logger.info(
            f"SolarPanel initialized: efficiency={efficiency}, area={area_m2}m²"
        )

    def update(self, sunlight_w_m2: float) -> float:
        """Recompute output from irradiance. Returns the new output in W."""
        if self._is_daytime:
            self._current_output_w = max(0.0, sunlight_w_m2) * self.area_m2 * self.efficiency
        else:
            self._current_output_w = 0.0
        return self._current_output_w

    def set_daytime(self, daytime: bool) -> None:
        """Takes effect on the next update() call."""
        self._is_daytime = daytime

    @property
    def is_daytime(self) -> bool:
        return self._is_daytime

    @property
    def current_output_w(self) -> float:
        return self._current_output_w

    def get_metrics(self) -> dict:
        return {
            "current_output_w": round(self._current_output_w, 3),
            "is_daytime": self._is_daytime,
            "efficiency": self.efficiency,
            "area_m2": self.area_m2,
        }
