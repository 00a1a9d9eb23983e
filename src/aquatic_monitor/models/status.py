"""
Status Report
=============

Consolidated system status emitted on the status interval.

The report is rendered as a single event-log line so that every
controller message keeps the one-line-per-event contract.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from aquatic_monitor.models.detection import DetectionRecord
from aquatic_monitor.models.readings import EnvironmentalReading
from aquatic_monitor.models.state import OperatingMode


class StatusReport(BaseModel):
    """
    Snapshot of the platform for periodic reporting.

    Attributes:
        timestamp: Local time of the report
        solar_output_w: Instantaneous solar output (W)
        battery_percent: Battery charge (%)
        mode: DAY or NIGHT
        last_marine: Marine detections from the last successful cycle
        last_waste: Waste detections from the last successful cycle
        last_reading: Most recent environmental reading, if any
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    solar_output_w: float = Field(..., ge=0.0)
    battery_percent: float = Field(..., ge=0.0, le=100.0)
    mode: OperatingMode
    last_marine: List[DetectionRecord] = Field(default_factory=list)
    last_waste: List[DetectionRecord] = Field(default_factory=list)
    last_reading: Optional[EnvironmentalReading] = None

    def to_line(self) -> str:
        """Render the report as one pipe-separated line."""
        parts = [
            "===== SYSTEM STATUS =====",
            f"Time: {self.timestamp.strftime('%Y-%m-%d %H:%M:%S')}",
            f"Solar Output: {self.solar_output_w:.2f} W",
            f"Battery Level: {self.battery_percent:.2f}%",
            f"Mode: {'Day' if self.mode == OperatingMode.DAY else 'Night'}",
        ]

        if self.last_marine:
            marine = self.last_marine[0]
            parts.append(
                f"Last Marine Detection: {marine.label} ({marine.confidence:.1f}%)"
            )
        if self.last_waste:
            waste = self.last_waste[0]
            parts.append(f"Last Waste Detection: {waste.label} ({waste.size:.1f} cm)")

        if self.last_reading is not None:
            reading = self.last_reading
            parts.append(
                f"Environment: {reading.temperature:.2f}°C, "
                f"{reading.turbidity:.2f} NTU, pH {reading.ph:.2f}"
            )
        else:
            parts.append("Environment: no reading yet")

        return " | ".join(parts)
