"""
Detection Module
================

Replay of recorded detections in place of live vision.

This module provides a black-box abstraction for observation. The
control loop consumes ONLY DetectionRecords and EnvironmentalReadings,
never raw dataset rows or image pixels.

Components:
    - DetectionSource: Cyclic replay with independent cursors
    - DatasetProvider: Protocol for record sources
    - CsvDatasetProvider: CSV-backed provider
    - StaticDatasetProvider: In-memory provider
    - ImageStore: Protocol for image lookup
    - FileImageStore: OpenCV file loader
    - NullImageStore: Blank frames when no image directory is configured
"""

from aquatic_monitor.detection.dataset import (
    CsvDatasetProvider,
    DatasetProvider,
    StaticDatasetProvider,
)
from aquatic_monitor.detection.images import FileImageStore, ImageStore, NullImageStore
from aquatic_monitor.detection.source import DetectionSource

__all__ = [
    "DetectionSource",
    "DatasetProvider",
    "CsvDatasetProvider",
    "StaticDatasetProvider",
    "ImageStore",
    "FileImageStore",
    "NullImageStore",
]
