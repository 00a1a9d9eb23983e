"""
Actuation Module
================

Simulated physical actuators.

Components:
    - ConveyorBelt: Waste collection conveyor (IDLE/ACTIVE state machine)
"""

from aquatic_monitor.actuation.conveyor import ConveyorBelt

__all__ = [
    "ConveyorBelt",
]
