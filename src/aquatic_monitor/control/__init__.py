"""
Control Module
==============

The energy-aware control loop and its policy.

Components:
    - Controller: Tick loop gating every activity behind the battery
    - ControlPolicy: Intervals, energy costs and thresholds
"""

from aquatic_monitor.control.loop import Controller
from aquatic_monitor.control.policy import ControlPolicy

__all__ = [
    "Controller",
    "ControlPolicy",
]
