"""
Dataset Providers
=================

Supply the finite record sequences replayed by the DetectionSource.

This module provides the DatasetProvider protocol and two
implementations:
    - CsvDatasetProvider: Reads the waste and marine CSV exports
    - StaticDatasetProvider: In-memory records for tests and simulation

CSV Handling:
    - Leading lines containing "> metadata." are skipped
    - The first remaining line is the header and is skipped
    - Empty numeric cells default to 0 (pH defaults to 7.0)
    - Malformed rows (including invalid UTF-8) are skipped with a warning, never fatal
    - A missing file yields an empty sequence
"""

import csv
import logging
from pathlib import Path
from typing import Callable, Iterator, List, Protocol, Sequence, TypeVar, Union

from pydantic import ValidationError

from aquatic_monitor.errors import DatasetError
from aquatic_monitor.models.records import MarineRecord, WasteRecord


logger = logging.getLogger(__name__)

METADATA_MARKER = "> metadata."

WASTE_COLUMNS = (
    "id", "water_body_type", "location_type", "waste_type", "waste_subtype",
    "image_file", "confidence", "size", "weight", "temperature", "turbidity", "ph",
)

MARINE_COLUMNS = (
    "id", "water_body_type", "location_type", "animal_type", "animal_species",
    "image_file", "confidence", "size", "weight", "activity", "temperature",
    "salinity", "ph",
)

WASTE_NUMERIC = ("confidence", "size", "weight", "temperature", "turbidity", "ph")
MARINE_NUMERIC = ("confidence", "size", "weight", "temperature", "salinity", "ph")

RecordT = TypeVar("RecordT", WasteRecord, MarineRecord)


class DatasetProvider(Protocol):
    """
    Protocol for dataset sources.

    Both methods are called once at startup and return ordered,
    finite sequences. Either may be empty.
    """

    def load_waste(self) -> List[WasteRecord]:
        ...

    def load_marine(self) -> List[MarineRecord]:
        ...


class StaticDatasetProvider:
    """Provider backed by in-memory sequences."""

    def __init__(
        self,
        waste: Sequence[WasteRecord] = (),
        marine: Sequence[MarineRecord] = (),
    ) -> None:
        self._waste = list(waste)
        self._marine = list(marine)

    def load_waste(self) -> List[WasteRecord]:
        return list(self._waste)

    def load_marine(self) -> List[MarineRecord]:
        return list(self._marine)


def _parse_float(value: str, default: float) -> float:
    value = value.strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise DatasetError(f"not a number: {value!r}")


def _row_to_fields(
    row: List[str],
    columns: Sequence[str],
    numeric: Sequence[str],
) -> dict:
    """Map a CSV row onto column names, converting numeric cells."""
    if len(row) < len(columns):
        raise DatasetError(f"expected {len(columns)} columns, got {len(row)}")

    fields = {}
    for name, cell in zip(columns, row):
        if name == "id":
            continue
        if name in numeric:
            fields[name] = _parse_float(cell, 7.0 if name == "ph" else 0.0)
        else:
            fields[name] = cell.strip()
    return fields


def _data_lines(handle) -> Iterator[bytes]:
    """Yield raw lines after the metadata preamble and the header row."""
    marker = METADATA_MARKER.encode("utf-8")
    header_seen = False
    in_preamble = True
    for line in handle:
        if in_preamble and marker in line:
            continue
        in_preamble = False
        if not header_seen:
            header_seen = True
            continue
        if line.strip():
            yield line


class CsvDatasetProvider:
    """
    Reads waste and marine records from CSV exports.

    Attributes:
        waste_path: Path to the waste dataset CSV
        marine_path: Path to the marine dataset CSV
        skipped_rows: Rows rejected during the last load
    """

    def __init__(
        self,
        waste_path: Union[str, Path],
        marine_path: Union[str, Path],
    ) -> None:
        self.waste_path = Path(waste_path)
        self.marine_path = Path(marine_path)
        self.skipped_rows: int = 0

    def load_waste(self) -> List[WasteRecord]:
        return self._load(
            self.waste_path,
            lambda row: WasteRecord(**_row_to_fields(row, WASTE_COLUMNS, WASTE_NUMERIC)),
        )

    def load_marine(self) -> List[MarineRecord]:
        return self._load(
            self.marine_path,
            lambda row: MarineRecord(**_row_to_fields(row, MARINE_COLUMNS, MARINE_NUMERIC)),
        )

    def _load(self, path: Path, build: Callable[[List[str]], RecordT]) -> List[RecordT]:
        if not path.exists():
            logger.error(f"Failed to open dataset file: {path}")
            return []

        records: List[RecordT] = []
        # Rows are decoded one at a time so a bad byte only costs its own row
        with open(path, "rb") as f:
            for raw in _data_lines(f):
                try:
                    row = next(csv.reader([raw.decode("utf-8")]))
                    records.append(build(row))
                except (UnicodeDecodeError, csv.Error, DatasetError, ValidationError) as e:
                    self.skipped_rows += 1
                    logger.warning(f"Skipping malformed row in {path.name}: {raw!r} ({e})")

        logger.info(f"Loaded {len(records)} records from {path}")
        return records
