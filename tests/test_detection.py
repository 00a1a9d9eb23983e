"""
Detection Tests
===============

Cyclic replay, environmental derivation, fallback policy, dataset
parsing and image lookup.
"""

import random
import threading
from collections import Counter
from pathlib import Path

import cv2
import numpy as np
import pytest

from aquatic_monitor.detection.dataset import CsvDatasetProvider, StaticDatasetProvider
from aquatic_monitor.detection.images import FileImageStore, NullImageStore
from aquatic_monitor.detection.source import DetectionSource
from aquatic_monitor.errors import ImageNotFoundError
from aquatic_monitor.models.detection import DetectionKind
from aquatic_monitor.models.readings import ReadingSource
from aquatic_monitor.models.records import WasteRecord


DATA_DIR = Path(__file__).parent.parent / "data"


class TestCyclicReplay:
    """Tests for the wrap-around cursors."""

    def test_waste_sequence_wraps(self, waste_records, marine_records, night_clock):
        """Two waste records replay as A, B, A."""
        source = DetectionSource(waste=waste_records, marine=marine_records, clock=night_clock)

        labels = [source.next_detections()[1][0].label for _ in range(3)]
        assert labels == ["Plastic (Bottle)", "Metal", "Plastic (Bottle)"]

    def test_marine_record_repeats_after_n_calls(self, waste_records, marine_records):
        """Call 1 and call N+1 yield the same marine record."""
        source = DetectionSource(waste=waste_records, marine=marine_records)
        n = len(marine_records)

        results = [source.next_detections()[0][0] for _ in range(n + 1)]
        assert results[0].label == results[n].label
        assert results[0].label != results[1].label

    def test_cursors_advance_independently(self, waste_records, marine_records):
        source = DetectionSource(waste=waste_records, marine=marine_records)
        for _ in range(4):
            source.next_detections()
        assert source.cursors == (4 % 3, 4 % 2)

    def test_empty_collection_gives_empty_half(self, waste_records):
        """An empty marine collection is not an error."""
        source = DetectionSource(waste=waste_records, marine=[])
        marine, waste = source.next_detections()
        assert marine == []
        assert len(waste) == 1

    def test_detections_stamped_with_clock(self, waste_records, marine_records, night_clock):
        source = DetectionSource(waste=waste_records, marine=marine_records, clock=night_clock)
        night_clock.advance(minutes=7)
        marine, waste = source.next_detections()
        assert marine[0].timestamp == night_clock.now()
        assert waste[0].timestamp == night_clock.now()
        assert marine[0].kind == DetectionKind.MARINE
        assert waste[0].image_ref == "waste_a.png"

    def test_concurrent_readers_see_every_record(self):
        """Parallel callers never skip or duplicate a cursor position."""
        waste = [WasteRecord(waste_type=name) for name in ("A", "B", "C")]
        source = DetectionSource(waste=waste, marine=[])
        seen = Counter()
        lock = threading.Lock()

        def worker():
            local = Counter()
            for _ in range(250):
                local[source.next_detections()[1][0].label] += 1
            with lock:
                seen.update(local)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert seen == Counter({"A": 334, "B": 333, "C": 333})
        assert source.cursors == (0, 1000 % 3)


class TestEnvironmentalReading:
    """Tests for reading derivation and the fallback policy."""

    def test_derived_from_current_cursors(self, waste_records, marine_records):
        """Temperature and pH averaged; turbidity from waste; salinity from marine."""
        source = DetectionSource(waste=waste_records, marine=marine_records)
        source.next_detections()  # cursors now at waste[1], marine[1]

        reading = source.next_environmental_reading()
        assert reading.source == ReadingSource.DATASET
        assert reading.temperature == pytest.approx((22.0 + 19.0) / 2)
        assert reading.ph == pytest.approx((7.6 + 7.3) / 2)
        assert reading.turbidity == pytest.approx(30.0)
        assert reading.salinity == pytest.approx(0.4)

    def test_reading_does_not_advance_cursors(self, waste_records, marine_records):
        source = DetectionSource(waste=waste_records, marine=marine_records)
        source.next_environmental_reading()
        assert source.cursors == (0, 0)

    def test_fallback_when_dataset_missing(self, waste_records):
        """Empty marine data switches to labeled synthetic readings."""
        source = DetectionSource(waste=waste_records, marine=[], rng=random.Random(3))
        assert not source.has_datasets

        for _ in range(20):
            reading = source.next_environmental_reading()
            assert reading.source == ReadingSource.FALLBACK
            assert 20.0 <= reading.temperature <= 34.0
            assert 0.0 <= reading.turbidity <= 49.0
            assert reading.ph in (6.5, 7.0, 7.5, 8.0, 8.5)
            assert reading.salinity in (0.5, 15.0, 35.0)

    def test_fallback_reproducible_with_seed(self):
        a = DetectionSource(rng=random.Random(11))
        b = DetectionSource(rng=random.Random(11))
        first = [a.next_environmental_reading() for _ in range(5)]
        second = [b.next_environmental_reading() for _ in range(5)]
        assert [r.model_dump(exclude={"timestamp"}) for r in first] == [
            r.model_dump(exclude={"timestamp"}) for r in second
        ]

    def test_current_image_ref(self, waste_records, marine_records):
        source = DetectionSource(waste=waste_records, marine=marine_records)
        assert source.current_image_ref(DetectionKind.MARINE) == "marine_a.png"
        assert source.current_image_ref(DetectionKind.WASTE) == "waste_a.png"
        assert DetectionSource().current_image_ref(DetectionKind.WASTE) is None


class TestDatasetProviders:
    """Tests for CSV and in-memory providers."""

    def test_csv_skips_metadata_header_and_bad_rows(self, tmp_path):
        path = tmp_path / "waste.csv"
        path.write_text(
            "> metadata.source: test\n"
            "> metadata.rows: 4\n"
            "id,water_body_type,location_type,waste_type,waste_subtype,image_file,"
            "confidence,size,weight,temperature,turbidity,ph\n"
            "1,River,Urban,Plastic,Bottle,a.jpg,90,20,0.1,18,12,7.2\n"
            "2,River,Urban,Metal,,b.jpg,80,,0.2,19,10,\n"
            "3,River,Urban,Glass\n"
            "4,River,Urban,Foam,,c.jpg,abc,1,1,1,1,7\n",
            encoding="utf-8",
        )
        provider = CsvDatasetProvider(waste_path=path, marine_path=tmp_path / "missing.csv")

        records = provider.load_waste()
        assert [r.label for r in records] == ["Plastic (Bottle)", "Metal"]
        assert records[1].size == 0.0
        assert records[1].ph == 7.0
        assert provider.skipped_rows == 2

    def test_undecodable_row_is_skipped(self, tmp_path):
        """A row with invalid UTF-8 costs only that row."""
        path = tmp_path / "waste.csv"
        path.write_bytes(
            b"> metadata.source: test\n"
            b"id,water_body_type,location_type,waste_type,waste_subtype,image_file,"
            b"confidence,size,weight,temperature,turbidity,ph\n"
            b"1,River,Urban,Plastic,Bottle,a.jpg,90,20,0.1,18,12,7.2\n"
            b"2,River,Urban,Caf\xe9,,b.jpg,80,5,0.2,19,10,7.0\n"
            b"3,River,Urban,Metal,,c.jpg,85,8,0.3,20,11,7.1\n"
        )
        provider = CsvDatasetProvider(waste_path=path, marine_path=tmp_path / "missing.csv")

        records = provider.load_waste()
        assert [r.label for r in records] == ["Plastic (Bottle)", "Metal"]
        assert provider.skipped_rows == 1

    def test_missing_file_yields_empty(self, tmp_path):
        provider = CsvDatasetProvider(tmp_path / "nope.csv", tmp_path / "nope2.csv")
        assert provider.load_waste() == []
        assert provider.load_marine() == []

    def test_bundled_datasets_load(self):
        """The sample datasets shipped in data/ parse cleanly."""
        provider = CsvDatasetProvider(
            DATA_DIR / "waste_detection_dataset.csv",
            DATA_DIR / "marine_animal_dataset.csv",
        )
        waste = provider.load_waste()
        marine = provider.load_marine()
        assert len(waste) == 5
        assert len(marine) == 4
        assert provider.skipped_rows == 0
        assert marine[2].activity == ""
        assert waste[3].label == "Foam"

    def test_static_provider_and_from_provider(self, waste_records, marine_records):
        provider = StaticDatasetProvider(waste=waste_records, marine=marine_records)
        source = DetectionSource.from_provider(provider)
        assert source.waste_count == 2
        assert source.marine_count == 3


class TestImageStore:
    """Tests for image lookup."""

    def test_loads_existing_image(self, tmp_path):
        cv2.imwrite(str(tmp_path / "frame.png"), np.zeros((4, 6, 3), dtype=np.uint8))
        image = FileImageStore(tmp_path).load("frame.png")
        assert image.shape == (4, 6, 3)

    def test_missing_image_raises(self, tmp_path):
        store = FileImageStore(tmp_path)
        with pytest.raises(ImageNotFoundError):
            store.load("absent.jpg")
        with pytest.raises(ImageNotFoundError):
            store.load("")
        assert store.misses == 2

    def test_unreadable_image_raises(self, tmp_path):
        (tmp_path / "broken.jpg").write_text("not an image")
        with pytest.raises(ImageNotFoundError):
            FileImageStore(tmp_path).load("broken.jpg")

    def test_null_store_always_returns_frame(self):
        image = NullImageStore().load("anything.jpg")
        assert image.shape == (1, 1, 3)
