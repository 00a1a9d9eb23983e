"""
Detection Source
================

Cyclic replay of marine and waste records.

The source holds two cursors, one per collection, that advance
independently and wrap to index 0 after the last element. A collection
of size N reproduces the same record every N-th call. Replay is
deterministic; randomness only appears in the labeled environmental
fallback.

Environmental readings are derived from the records under the current
(pre-advance) cursors:
    temperature = mean(waste.temperature, marine.temperature)
    ph          = mean(waste.ph, marine.ph)
    turbidity   = waste.turbidity
    salinity    = marine.salinity

Fallback Policy:
    If either collection is empty, readings are drawn from the injected
    random generator and tagged ReadingSource.FALLBACK.

All cursor reads and advances happen under one lock.
"""

import logging
import random
import threading
from typing import List, Optional, Sequence, Tuple

from aquatic_monitor.core.clock import Clock, SystemClock
from aquatic_monitor.detection.dataset import DatasetProvider
from aquatic_monitor.models.detection import DetectionKind, DetectionRecord
from aquatic_monitor.models.readings import EnvironmentalReading, ReadingSource
from aquatic_monitor.models.records import MarineRecord, WasteRecord


logger = logging.getLogger(__name__)

FALLBACK_SALINITIES = (0.5, 15.0, 35.0)


class DetectionSource:
    """
    Thread-safe cyclic record replayer.

    Attributes:
        waste_count: Size of the waste collection
        marine_count: Size of the marine collection

    Example:
        source = DetectionSource(waste=[a, b], marine=[m])
        marine, waste = source.next_detections()   # waste == [a]
        marine, waste = source.next_detections()   # waste == [b]
        marine, waste = source.next_detections()   # waste == [a]
    """

    def __init__(
        self,
        waste: Sequence[WasteRecord] = (),
        marine: Sequence[MarineRecord] = (),
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._waste: Tuple[WasteRecord, ...] = tuple(waste)
        self._marine: Tuple[MarineRecord, ...] = tuple(marine)
        self._clock = clock or SystemClock()
        self._rng = rng or random.Random()

        self._waste_index: int = 0
        self._marine_index: int = 0
        self._lock = threading.Lock()
        self._fallback_warned: bool = False

        if not self.has_datasets:
            logger.warning(
                f"One or both datasets are empty (waste={len(self._waste)}, "
                f"marine={len(self._marine)}); environmental readings will use fallback values"
            )

    @classmethod
    def from_provider(
        cls,
        provider: DatasetProvider,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
    ) -> "DetectionSource":
        """Build a source from the sequences a provider yields at startup."""
        return cls(
            waste=provider.load_waste(),
            marine=provider.load_marine(),
            clock=clock,
            rng=rng,
        )

    @property
    def waste_count(self) -> int:
        return len(self._waste)

    @property
    def marine_count(self) -> int:
        return len(self._marine)

    @property
    def has_datasets(self) -> bool:
        return bool(self._waste) and bool(self._marine)

    @property
    def cursors(self) -> Tuple[int, int]:
        """Current (marine, waste) cursor positions."""
        with self._lock:
            return self._marine_index, self._waste_index

    def next_detections(self) -> Tuple[List[DetectionRecord], List[DetectionRecord]]:
        """
        Return the records under both cursors and advance each by one.

        Returns:
            (marine_detections, waste_detections). A half is empty when
            its collection is empty.
        """
        now = self._clock.now()
        marine: List[DetectionRecord] = []
        waste: List[DetectionRecord] = []

        with self._lock:
            if self._marine:
                marine.append(self._marine[self._marine_index].to_detection(now))
                self._marine_index = (self._marine_index + 1) % len(self._marine)

            if self._waste:
                waste.append(self._waste[self._waste_index].to_detection(now))
                self._waste_index = (self._waste_index + 1) % len(self._waste)

        return marine, waste

    def next_environmental_reading(self) -> EnvironmentalReading:
        """Reading derived from the current records, or the fallback."""
        now = self._clock.now()

        with self._lock:
            if self._waste and self._marine:
                waste = self._waste[self._waste_index]
                marine = self._marine[self._marine_index]
                return EnvironmentalReading(
                    temperature=(waste.temperature + marine.temperature) / 2.0,
                    turbidity=waste.turbidity,
                    ph=(waste.ph + marine.ph) / 2.0,
                    salinity=marine.salinity,
                    timestamp=now,
                    source=ReadingSource.DATASET,
                )

        return self._fallback_reading(now)

    def _fallback_reading(self, now) -> EnvironmentalReading:
        if not self._fallback_warned:
            logger.warning("Using synthetic fallback for environmental readings")
            self._fallback_warned = True

        return EnvironmentalReading(
            temperature=20.0 + self._rng.randrange(15),
            turbidity=float(self._rng.randrange(50)),
            ph=6.5 + self._rng.randrange(5) / 2.0,
            salinity=self._rng.choice(FALLBACK_SALINITIES),
            timestamp=now,
            source=ReadingSource.FALLBACK,
        )

    def current_image_ref(self, kind: DetectionKind) -> Optional[str]:
        """Image reference of the record under the cursor for ``kind``."""
        with self._lock:
            if kind == DetectionKind.MARINE:
                if not self._marine:
                    return None
                return self._marine[self._marine_index].image_file
            if not self._waste:
                return None
            return self._waste[self._waste_index].image_file

    def get_metrics(self) -> dict:
        with self._lock:
            return {
                "waste_count": len(self._waste),
                "marine_count": len(self._marine),
                "waste_cursor": self._waste_index,
                "marine_cursor": self._marine_index,
            }
