"""
State Enums
===========

Discrete states shared between the actuator, the control loop and the
status report.
"""

from enum import Enum


class ConveyorState(str, Enum):
    """
    Collection actuator state.

    Transitions:
        IDLE → ACTIVE: activate() or process_item() on an idle belt
        ACTIVE → IDLE: stop()
    """

    IDLE = "IDLE"
    ACTIVE = "ACTIVE"


class OperatingMode(str, Enum):
    """Day/night mode derived from the local hour."""

    DAY = "DAY"
    NIGHT = "NIGHT"


class ShutdownReason(str, Enum):
    """Why the control loop exited."""

    STOPPED = "STOPPED"
    CRITICAL_BATTERY = "CRITICAL_BATTERY"
