"""
Power Tests
===========

Battery conservation and solar model behaviour.
"""

import random
import threading

import pytest

from aquatic_monitor.power.battery import Battery
from aquatic_monitor.power.solar import SolarPanel, is_daytime, sunlight_intensity


class TestBattery:
    """Tests for the energy store."""

    def test_reference_scenario(self):
        """350Wh start, charge 50W·1h, refuse 450Wh, accept 40Wh."""
        battery = Battery(capacity_wh=500.0, max_charge_rate_w=100.0)
        assert battery.current_charge_wh == pytest.approx(350.0)

        battery.charge(50.0, 1.0)
        assert battery.current_charge_wh == pytest.approx(400.0)

        assert battery.discharge(450.0, 1.0) is False
        assert battery.current_charge_wh == pytest.approx(400.0)

        assert battery.discharge(40.0, 1.0) is True
        assert battery.current_charge_wh == pytest.approx(360.0)

    def test_charge_clamped_to_rate_and_capacity(self):
        """Power above the rate limit and energy above capacity are lost."""
        battery = Battery(capacity_wh=500.0, max_charge_rate_w=100.0, initial_charge_fraction=0.0)

        stored = battery.charge(1000.0, 1.0)
        assert stored == pytest.approx(100.0)

        battery.charge(100.0, 10.0)
        assert battery.current_charge_wh == pytest.approx(500.0)
        assert battery.charge_percentage() == pytest.approx(100.0)

    def test_charge_ignores_non_positive_inputs(self):
        """Negative power or time never removes energy."""
        battery = Battery(capacity_wh=100.0, initial_charge_fraction=0.5)
        battery.charge(-50.0, 1.0)
        battery.charge(50.0, -1.0)
        assert battery.current_charge_wh == pytest.approx(50.0)

    def test_discharge_exact_remaining_energy(self):
        """A request equal to the remaining charge succeeds and empties the store."""
        battery = Battery(capacity_wh=100.0, initial_charge_fraction=0.25)
        assert battery.discharge(25.0, 1.0) is True
        assert battery.current_charge_wh == 0.0
        assert battery.discharge(0.001, 1.0) is False
        assert battery.failed_discharges == 1

    def test_conservation_over_random_sequence(self):
        """Charge stays in [0, capacity]; discharges are all-or-nothing."""
        rng = random.Random(1234)
        battery = Battery(capacity_wh=200.0, max_charge_rate_w=50.0, initial_charge_fraction=0.5)

        for _ in range(2000):
            power = rng.uniform(0.0, 120.0)
            hours = rng.uniform(0.0, 2.0)
            before = battery.current_charge_wh

            if rng.random() < 0.5:
                battery.charge(power, hours)
                expected = min(200.0, before + min(power, 50.0) * hours)
                assert battery.current_charge_wh == pytest.approx(expected)
            else:
                ok = battery.discharge(power, hours)
                if ok:
                    assert battery.current_charge_wh == pytest.approx(before - power * hours)
                else:
                    assert battery.current_charge_wh == before

            assert 0.0 <= battery.current_charge_wh <= battery.capacity_wh

    def test_concurrent_discharges_never_overdraw(self):
        """Parallel discharges succeed exactly as often as energy allows."""
        battery = Battery(capacity_wh=100.0, initial_charge_fraction=1.0)
        successes = []
        lock = threading.Lock()

        def worker():
            count = 0
            for _ in range(50):
                if battery.discharge(1.0, 1.0):
                    count += 1
            with lock:
                successes.append(count)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(successes) == 100
        assert battery.current_charge_wh == 0.0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"capacity_wh": 0.0},
            {"max_charge_rate_w": 0.0},
            {"initial_charge_fraction": 1.5},
            {"initial_charge_fraction": -0.1},
        ],
    )
    def test_invalid_parameters_rejected(self, kwargs):
        """Nonsensical battery parameters raise ValueError."""
        with pytest.raises(ValueError):
            Battery(**kwargs)

    def test_metrics_snapshot(self):
        battery = Battery(capacity_wh=500.0)
        metrics = battery.get_metrics()
        assert metrics["charge_percent"] == pytest.approx(70.0)
        assert metrics["failed_discharges"] == 0


class TestSolar:
    """Tests for the solar panel and sunlight curve."""

    def test_update_is_idempotent(self):
        """Same input twice gives the same output."""
        panel = SolarPanel(efficiency=0.2, area_m2=0.75)
        first = panel.update(800.0)
        second = panel.update(800.0)
        assert first == second == pytest.approx(120.0)

    def test_night_output_is_zero(self):
        panel = SolarPanel()
        panel.set_daytime(False)
        assert panel.update(800.0) == 0.0

    def test_set_daytime_applies_on_next_update(self):
        """Toggling the flag does not recompute the current output."""
        panel = SolarPanel(efficiency=0.2, area_m2=0.75)
        panel.update(800.0)
        panel.set_daytime(False)
        assert panel.current_output_w == pytest.approx(120.0)
        panel.update(800.0)
        assert panel.current_output_w == 0.0

    def test_sunlight_curve_shape(self):
        """Half-sine over [6, 18), peaking at noon, zero at night."""
        assert sunlight_intensity(3.0) == 0.0
        assert sunlight_intensity(18.0) == 0.0
        assert sunlight_intensity(6.0) == pytest.approx(500.0)
        assert sunlight_intensity(12.0) == pytest.approx(800.0)
        assert sunlight_intensity(9.0) == pytest.approx(sunlight_intensity(15.0))
        assert sunlight_intensity(12.0) > sunlight_intensity(10.0)

    def test_daytime_window(self):
        assert is_daytime(6)
        assert is_daytime(17.99)
        assert not is_daytime(5.99)
        assert not is_daytime(18)

    def test_invalid_panel_rejected(self):
        with pytest.raises(ValueError):
            SolarPanel(efficiency=0.0)
        with pytest.raises(ValueError):
            SolarPanel(area_m2=-1.0)
