"""
Test Configuration
==================

Pytest fixtures and test configuration for the aquatic monitor.
"""

import random
from datetime import datetime

import pytest


NIGHT = datetime(2024, 6, 1, 2, 0, 0)
NOON = datetime(2024, 6, 1, 12, 0, 0)


@pytest.fixture
def night_clock():
    """Manual clock parked at 02:00, when the panel produces nothing."""
    from aquatic_monitor.core.clock import ManualClock

    return ManualClock(NIGHT)


@pytest.fixture
def noon_clock():
    """Manual clock parked at local noon."""
    from aquatic_monitor.core.clock import ManualClock

    return ManualClock(NOON)


@pytest.fixture
def waste_records():
    """Two waste rows, A then B."""
    from aquatic_monitor.models.records import WasteRecord

    return [
        WasteRecord(
            waste_type="Plastic",
            waste_subtype="Bottle",
            image_file="waste_a.png",
            confidence=91.0,
            size=22.5,
            temperature=18.0,
            turbidity=12.0,
            ph=7.2,
        ),
        WasteRecord(
            waste_type="Metal",
            waste_subtype="",
            image_file="waste_b.png",
            confidence=80.0,
            size=10.0,
            temperature=22.0,
            turbidity=30.0,
            ph=7.6,
        ),
    ]


@pytest.fixture
def marine_records():
    """Three marine rows."""
    from aquatic_monitor.models.records import MarineRecord

    return [
        MarineRecord(
            animal_species="Atlantic Cod",
            image_file="marine_a.png",
            confidence=89.5,
            size=45.0,
            activity="Swimming",
            temperature=16.0,
            salinity=34.5,
            ph=8.0,
        ),
        MarineRecord(
            animal_species="Mallard",
            image_file="marine_b.png",
            confidence=95.0,
            size=55.0,
            activity="Feeding",
            temperature=19.0,
            salinity=0.4,
            ph=7.3,
        ),
        MarineRecord(
            animal_species="Green Crab",
            image_file="marine_c.png",
            confidence=81.0,
            size=8.0,
            activity="",
            temperature=16.5,
            salinity=33.0,
            ph=8.1,
        ),
    ]


@pytest.fixture
def event_sink(tmp_path, night_clock):
    """Event sink writing to a temp file only, stamped by the night clock."""
    from aquatic_monitor.observability.event_sink import EventSink

    sink = EventSink(tmp_path / "events.log", console=None, clock=night_clock)
    yield sink
    sink.close()


def read_events(sink):
    """Lines written so far by an EventSink."""
    for handler in sink._handlers:
        handler.flush()
    return sink.path.read_text(encoding="utf-8").splitlines()


@pytest.fixture
def make_controller(event_sink, night_clock, waste_records, marine_records):
    """
    Factory for controllers on the night clock.

    Keyword arguments override the battery, datasets, policy and
    collaborators.
    """
    from aquatic_monitor.actuation.conveyor import ConveyorBelt
    from aquatic_monitor.control.loop import Controller
    from aquatic_monitor.control.policy import ControlPolicy
    from aquatic_monitor.detection.source import DetectionSource
    from aquatic_monitor.power.battery import Battery
    from aquatic_monitor.power.solar import SolarPanel

    def _make(
        charge_wh=350.0,
        capacity_wh=500.0,
        waste=None,
        marine=None,
        policy=None,
        clock=None,
        image_store=None,
    ):
        clock = clock or night_clock
        rng = random.Random(7)
        source = DetectionSource(
            waste=waste_records if waste is None else waste,
            marine=marine_records if marine is None else marine,
            clock=clock,
            rng=rng,
        )
        battery = Battery(
            capacity_wh=capacity_wh,
            max_charge_rate_w=100.0,
            initial_charge_fraction=charge_wh / capacity_wh,
        )
        return Controller(
            solar=SolarPanel(efficiency=0.20, area_m2=0.75),
            battery=battery,
            conveyor=ConveyorBelt(clock=clock),
            source=source,
            sink=event_sink,
            image_store=image_store,
            clock=clock,
            policy=policy or ControlPolicy(),
            rng=rng,
        )

    return _make


@pytest.fixture
def events(event_sink):
    """Callable returning the event lines written so far."""
    return lambda: read_events(event_sink)
