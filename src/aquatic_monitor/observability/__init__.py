"""
Observability Module
====================

Operator-facing event output.

Components:
    - EventSink: Timestamped, line-oriented event log mirrored to the console

Diagnostic logging (module loggers configured by ``setup_logging``) is
separate from the event log and never replaces it.
"""

from aquatic_monitor.observability.event_sink import EventSink

__all__ = [
    "EventSink",
]
