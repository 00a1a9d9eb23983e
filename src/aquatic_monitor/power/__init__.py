"""
Power Module
============

Solar income and battery storage.

Components:
    - SolarPanel: Irradiance to output power
    - Battery: Thread-safe energy store with all-or-nothing discharge
    - sunlight_intensity: Synthetic half-sine daylight curve
    - is_daytime: Day window check on the local hour
"""

from aquatic_monitor.power.battery import Battery
from aquatic_monitor.power.solar import SolarPanel, is_daytime, sunlight_intensity

__all__ = [
    "Battery",
    "SolarPanel",
    "is_daytime",
    "sunlight_intensity",
]
