"""
Environmental Readings
======================

Water-quality sample produced once per sampling interval.

Readings come from one of two explicitly labeled paths:
    - DATASET: derived from the records under the detection cursors
    - FALLBACK: synthetic values used when a dataset is missing

Readings are immutable once created. The controller only keeps the
most recent one for status reporting.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ReadingSource(str, Enum):
    """Which path produced an environmental reading."""

    DATASET = "DATASET"
    FALLBACK = "FALLBACK"


class EnvironmentalReading(BaseModel):
    """
    Snapshot of water conditions at the platform.

    Attributes:
        temperature: Water temperature in °C
        turbidity: Turbidity in NTU
        ph: Acidity (pH units)
        salinity: Salinity in ppt
        timestamp: Local time the sample was taken
        source: DATASET or FALLBACK
    """

    model_config = ConfigDict(frozen=True)

    temperature: float = Field(..., description="Water temperature (°C)")
    turbidity: float = Field(..., ge=0.0, description="Turbidity (NTU)")
    ph: float = Field(..., ge=0.0, le=14.0, description="pH")
    salinity: float = Field(..., ge=0.0, description="Salinity (ppt)")
    timestamp: datetime = Field(..., description="Local time of the sample")
    source: ReadingSource = Field(
        default=ReadingSource.DATASET,
        description="Path that produced this reading",
    )

    def describe(self) -> str:
        """Single-line human readable summary."""
        return (
            f"Temp: {self.temperature:.2f}°C | "
            f"Turbidity: {self.turbidity:.2f} NTU | "
            f"pH: {self.ph:.2f} | "
            f"Salinity: {self.salinity:.2f} ppt"
        )
