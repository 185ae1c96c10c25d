"""Tests for device models, charging links and tick results."""

import json
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from energy_simulation.models import (
    CRITICAL_BATTERY_LEVEL,
    Car,
    ChargingLinks,
    DeviceKind,
    HouseholdSnapshot,
    PhasePower,
    SmartMeter,
    SolarInverter,
    Stove,
    TickResult,
    Wallbox,
    device_from_dict,
    new_device_id,
)


class TestDevices:
    """Tests for the device dataclasses."""

    def test_kinds(self):
        """Test every device class is tagged with its kind."""
        assert SolarInverter(device_id="a").kind is DeviceKind.SOLAR_INVERTER
        assert Stove(device_id="b").kind is DeviceKind.STOVE
        assert Car(device_id="c").kind is DeviceKind.CAR
        assert Wallbox(device_id="d").kind is DeviceKind.WALLBOX
        assert SmartMeter(device_id="e").kind is DeviceKind.SMART_METER

    def test_new_device_ids_are_unique(self):
        """Test generated ids differ."""
        assert new_device_id() != new_device_id()

    @pytest.mark.parametrize("level, critical", [(0, True), (9, True), (10, False), (100, False)])
    def test_car_critical_derived_from_level(self, level, critical):
        """Test the critical flag is derived on construction."""
        car = Car(device_id="car", battery_level=level, battery_critical=not critical)
        assert car.battery_critical is critical

    def test_critical_recomputed_on_replace(self):
        """Test replacing the battery level alone keeps the critical flag in step."""
        car = Car(device_id="car", battery_level=CRITICAL_BATTERY_LEVEL)

        low = replace(car, battery_level=CRITICAL_BATTERY_LEVEL - 1)

        assert car.battery_critical is False
        assert low.battery_critical is True
        assert replace(low, battery_level=80).battery_critical is False

    def test_invalid_phase_raises_error(self):
        """Test unknown phases are rejected."""
        with pytest.raises(ValueError, match="phase must be one of"):
            SolarInverter(device_id="inv", phase="D")

        with pytest.raises(ValueError, match="phase must be one of"):
            Wallbox(device_id="wb", phase="all")

    def test_invalid_capacity_raises_error(self):
        """Test non-positive capacities are rejected."""
        with pytest.raises(ValueError, match="max_capacity_w must be positive"):
            SolarInverter(device_id="inv", max_capacity_w=0)

        with pytest.raises(ValueError, match="capacity_wh must be positive"):
            Car(device_id="car", capacity_wh=-1)

        with pytest.raises(ValueError, match="max_power_consumption_w must be positive"):
            Stove(device_id="stove", max_power_consumption_w=0)

    def test_invalid_battery_level_raises_error(self):
        """Test battery levels outside 0-100 are rejected."""
        with pytest.raises(ValueError, match="battery_level must be in the range"):
            Car(device_id="car", battery_level=101)

        with pytest.raises(ValueError, match="battery_level must be in the range"):
            Car(device_id="car", battery_level=-1)

    def test_negative_current_raises_error(self):
        """Test negative currents are rejected."""
        with pytest.raises(ValueError, match="max_charging_current must not be negative"):
            Wallbox(device_id="wb", max_charging_current=-1)

        with pytest.raises(ValueError, match="min_charging_current must not be negative"):
            Car(device_id="car", min_charging_current=-6)

    def test_device_dict_round_trip(self):
        """Test devices survive to_dict and device_from_dict."""
        update = datetime(2024, 6, 21, 12, 0, tzinfo=timezone.utc)
        devices = [
            SolarInverter(device_id="inv", phase="B", current_power_w=-1234.5),
            Stove(device_id="stove", powered=True, cycle=3, total_energy_consumed_kwh=0.25),
            Car(device_id="car", plugged_in=True, battery_level=42, last_charge_update=update),
            Wallbox(device_id="wb", powered=True, plugged_in=True, max_charging_current=10),
            SmartMeter(device_id="meter", total_power_w=-500.0, total_energy_produced_kwh=1.5),
        ]

        for device in devices:
            assert device_from_dict(device.to_dict()) == device


class TestPhasePower:
    """Tests for PhasePower."""

    def test_add_single_phase(self):
        power = PhasePower()
        power.add("B", 250)
        assert power == PhasePower(0, 250, 0)

    def test_add_all_phases(self):
        power = PhasePower()
        power.add("All", 900)
        assert power.a == pytest.approx(300)
        assert power.total == pytest.approx(900)

    def test_unknown_phase_raises_error(self):
        with pytest.raises(ValueError, match="Unknown phase"):
            PhasePower().add("D", 1)

        with pytest.raises(ValueError, match="Unknown phase"):
            PhasePower().get("All")

    def test_sum(self):
        assert PhasePower(1, 2, 3) + PhasePower(-1, -1, -1) == PhasePower(0, 1, 2)


class TestChargingLinks:
    """Tests for ChargingLinks."""

    def test_connect_both_directions(self):
        """Test a link is visible from both sides."""
        links = ChargingLinks()
        links.connect("wb", "car")

        assert links.car_for("wb") == "car"
        assert links.wallbox_for("car") == "wb"
        assert not links.is_free("wb")

    def test_wallbox_takes_one_car(self):
        """Test a second car cannot join an occupied wallbox."""
        links = ChargingLinks({"wb": "car1"})

        with pytest.raises(ValueError, match="already has a car"):
            links.connect("wb", "car2")

        assert links.wallbox_for("car2") is None

    def test_car_takes_one_wallbox(self):
        """Test a car cannot be linked to two wallboxes."""
        links = ChargingLinks({"wb1": "car"})

        with pytest.raises(ValueError, match="already connected"):
            links.connect("wb2", "car")

        assert links.is_free("wb2")

    def test_disconnect_clears_both_sides(self):
        """Test disconnecting from either side removes the whole link."""
        links = ChargingLinks({"wb1": "car1", "wb2": "car2"})

        assert links.disconnect_car("car1") == "wb1"
        assert links.disconnect_wallbox("wb2") == "car2"

        assert len(links) == 0
        assert links.car_for("wb1") is None
        assert links.wallbox_for("car2") is None

    def test_disconnect_unlinked(self):
        """Test disconnecting something unlinked is a no-op."""
        links = ChargingLinks()
        assert links.disconnect_car("car") is None
        assert links.disconnect_wallbox("wb") is None

    def test_copy_is_independent(self):
        """Test a copy does not follow changes to the original."""
        links = ChargingLinks({"wb": "car"})
        copied = links.copy()
        links.disconnect_car("car")

        assert copied.car_for("wb") == "car"
        assert copied != links


class TestHouseholdSnapshot:
    """Tests for HouseholdSnapshot."""

    def test_lookup(self):
        snapshot = HouseholdSnapshot(devices=(Stove(device_id="s"), Car(device_id="c")))

        assert snapshot.find("c").kind is DeviceKind.CAR
        assert snapshot.find("x") is None
        assert snapshot.find(None) is None
        assert [d.device_id for d in snapshot.of_kind(DeviceKind.STOVE)] == ["s"]
        assert len(snapshot) == 2


class TestTickResult:
    """Tests for TickResult."""

    @pytest.fixture
    def result(self):
        now = datetime(2024, 6, 21, 12, 0, tzinfo=timezone.utc)
        return TickResult(
            timestamp=now,
            interval_seconds=5,
            sunrise=now - timedelta(hours=7),
            sunset=now + timedelta(hours=8),
            production=PhasePower(-300, -300, -300),
            consumption=PhasePower(2100, 100, 100),
            devices=(
                SolarInverter(device_id="inv", current_power_w=-900),
                Stove(device_id="stove", powered=True, current_power_w=2000),
                Car(device_id="car", plugged_in=True),
                Wallbox(device_id="wb", plugged_in=True),
                SmartMeter(device_id="meter", total_power_w=1400),
            ),
            links=ChargingLinks({"wb": "car"}),
        )

    def test_total_power(self, result):
        assert result.total_power_w == pytest.approx(1400)

    def test_to_json(self, result):
        data = json.loads(result.to_json())

        assert data["timestamp"] == "2024-06-21T12:00:00+00:00"
        assert data["total_power_w"] == pytest.approx(1400)
        assert data["links"] == {"wb": "car"}
        assert len(data["devices"]) == 5

    def test_from_dict(self, result):
        restored = TickResult.from_dict(json.loads(result.to_json()))

        assert restored.timestamp == result.timestamp
        assert restored.production == result.production
        assert restored.devices == result.devices
        assert restored.links == result.links
