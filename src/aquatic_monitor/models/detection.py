"""
Detection Records
=================

Output of one detection cycle. Two independent streams exist, marine
life and waste, distinguished by ``kind``.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DetectionKind(str, Enum):
    """Stream a detection belongs to."""

    MARINE = "MARINE"
    WASTE = "WASTE"


class DetectionRecord(BaseModel):
    """
    A single detected object.

    Attributes:
        kind: MARINE or WASTE
        label: Species for marine life, waste type (and subtype) for waste
        confidence: Detection confidence in percent [0, 100]
        size: Object size in cm (0 = not applicable)
        activity: Observed behaviour ("" = not applicable)
        image_ref: Image the detection was taken from ("" = none)
        timestamp: Local time the detection was produced
    """

    model_config = ConfigDict(frozen=True)

    kind: DetectionKind
    label: str = Field(..., min_length=1)
    confidence: float = Field(..., ge=0.0, le=100.0)
    size: float = Field(default=0.0, ge=0.0)
    activity: str = Field(default="")
    image_ref: str = Field(default="")
    timestamp: datetime

    def describe(self) -> str:
        """Single-line summary, omitting fields that do not apply."""
        text = f"{self.label} ({self.confidence:.1f}%)"
        if self.size > 0:
            text += f" | Size: {self.size:.1f} cm"
        if self.activity:
            text += f" | Activity: {self.activity}"
        return text
