"""
Dataset Records
===============

Rows supplied by a DatasetProvider at startup.

Each row carries both the detection attributes replayed by the
DetectionSource and the water-quality values used to derive
environmental readings.

Waste row layout:
    id, water_body_type, location_type, waste_type, waste_subtype,
    image_file, confidence, size, weight, temperature, turbidity, ph

Marine row layout:
    id, water_body_type, location_type, animal_type, animal_species,
    image_file, confidence, size, weight, activity, temperature,
    salinity, ph
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from aquatic_monitor.models.detection import DetectionKind, DetectionRecord


class WasteRecord(BaseModel):
    """One row of the waste dataset."""

    model_config = ConfigDict(frozen=True)

    water_body_type: str = ""
    location_type: str = ""
    waste_type: str = Field(..., min_length=1)
    waste_subtype: str = ""
    image_file: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=100.0)
    size: float = Field(default=0.0, ge=0.0)
    weight: float = Field(default=0.0, ge=0.0)
    temperature: float = 0.0
    turbidity: float = Field(default=0.0, ge=0.0)
    ph: float = Field(default=7.0, ge=0.0, le=14.0)

    @property
    def label(self) -> str:
        if self.waste_subtype:
            return f"{self.waste_type} ({self.waste_subtype})"
        return self.waste_type

    def to_detection(self, timestamp: datetime) -> DetectionRecord:
        return DetectionRecord(
            kind=DetectionKind.WASTE,
            label=self.label,
            confidence=self.confidence,
            size=self.size,
            activity="",
            image_ref=self.image_file,
            timestamp=timestamp,
        )


class MarineRecord(BaseModel):
    """One row of the marine life dataset."""

    model_config = ConfigDict(frozen=True)

    water_body_type: str = ""
    location_type: str = ""
    animal_type: str = ""
    animal_species: str = Field(..., min_length=1)
    image_file: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=100.0)
    size: float = Field(default=0.0, ge=0.0)
    weight: float = Field(default=0.0, ge=0.0)
    activity: str = ""
    temperature: float = 0.0
    salinity: float = Field(default=0.0, ge=0.0)
    ph: float = Field(default=7.0, ge=0.0, le=14.0)

    @property
    def label(self) -> str:
        return self.animal_species

    def to_detection(self, timestamp: datetime) -> DetectionRecord:
        return DetectionRecord(
            kind=DetectionKind.MARINE,
            label=self.label,
            confidence=self.confidence,
            size=self.size,
            activity=self.activity,
            image_ref=self.image_file,
            timestamp=timestamp,
        )
