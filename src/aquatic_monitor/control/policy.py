"""
Control Policy
==============

Timing, energy costs and battery thresholds for the control loop.

Loaded from configuration by ``main``; defaults are the reference
values of the platform.

Energy Gates:
    Environmental sample: sensor_power_w × sensor_duration_hours
    Detection cycle:      (camera_power_w + processing_power_w) × detection_duration_hours
    Waste collection:     conveyor draw × collection_duration_hours

Battery Thresholds:
    collection_threshold_percent: collection runs only ABOVE this level
    critical_shutdown_percent:    loop stops AT OR BELOW this level
"""

from dataclasses import dataclass


@dataclass
class ControlPolicy:
    """Scheduling and admission parameters for the Controller."""

    # Loop timing (seconds)
    tick_seconds: float = 1.0
    error_backoff_seconds: float = 1.0

    # Action intervals (hours)
    env_interval_hours: float = 1.0 / 12.0
    detection_interval_hours: float = 1.0 / 6.0
    status_interval_hours: float = 0.25

    # Energy costs
    sensor_power_w: float = 2.0
    sensor_duration_hours: float = 0.01
    camera_power_w: float = 5.0
    processing_power_w: float = 10.0
    detection_duration_hours: float = 0.05
    collection_duration_hours: float = 2.0 / 3600.0

    # Battery thresholds (%)
    collection_threshold_percent: float = 20.0
    critical_shutdown_percent: float = 5.0

    # Water quality alarms
    ph_min: float = 6.5
    ph_max: float = 8.5
    turbidity_max_ntu: float = 50.0

    # Sunlight curve (W/m²)
    sunlight_base_w_m2: float = 500.0
    sunlight_amplitude_w_m2: float = 300.0

    @property
    def detection_power_w(self) -> float:
        return self.camera_power_w + self.processing_power_w

    def validate(self) -> "ControlPolicy":
        """Raise ValueError on inconsistent settings; returns self."""
        if self.tick_seconds <= 0:
            raise ValueError("tick_seconds must be positive")
        if min(self.env_interval_hours, self.detection_interval_hours, self.status_interval_hours) <= 0:
            raise ValueError("intervals must be positive")
        if not 0 <= self.critical_shutdown_percent < 100:
            raise ValueError("critical_shutdown_percent must be in [0, 100)")
        if self.collection_threshold_percent < self.critical_shutdown_percent:
            raise ValueError("collection_threshold_percent must not be below critical_shutdown_percent")
        if self.ph_min > self.ph_max:
            raise ValueError("ph_min must not exceed ph_max")
        return self
