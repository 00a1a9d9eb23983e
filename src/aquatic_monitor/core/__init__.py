"""
Core Module
===========

Shared primitives used by every other layer.

Components:
    - Clock: Protocol for time sources
    - SystemClock: Real wall-clock time
    - ManualClock: Virtual time for tests and accelerated runs
"""

from aquatic_monitor.core.clock import Clock, ManualClock, SystemClock

__all__ = [
    "Clock",
    "SystemClock",
    "ManualClock",
]
