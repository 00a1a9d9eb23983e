"""
Data Models
===========

Pydantic models for the aquatic monitor.

This module re-exports all data models for convenient access.

Models:
    Dataset:
        - WasteRecord: One row of the waste dataset
        - MarineRecord: One row of the marine life dataset

    Observations:
        - DetectionKind: MARINE or WASTE
        - DetectionRecord: A detected object, tagged with time
        - ReadingSource: DATASET or FALLBACK
        - EnvironmentalReading: Water-quality sample

    State:
        - ConveyorState: IDLE or ACTIVE
        - OperatingMode: DAY or NIGHT
        - ShutdownReason: Why the control loop exited

    Output:
        - StatusReport: Periodic consolidated status
"""

from aquatic_monitor.models.detection import DetectionKind, DetectionRecord
from aquatic_monitor.models.readings import EnvironmentalReading, ReadingSource
from aquatic_monitor.models.records import MarineRecord, WasteRecord
from aquatic_monitor.models.state import ConveyorState, OperatingMode, ShutdownReason
from aquatic_monitor.models.status import StatusReport

__all__ = [
    # Dataset
    "WasteRecord",
    "MarineRecord",
    # Observations
    "DetectionKind",
    "DetectionRecord",
    "ReadingSource",
    "EnvironmentalReading",
    # State
    "ConveyorState",
    "OperatingMode",
    "ShutdownReason",
    # Output
    "StatusReport",
]
