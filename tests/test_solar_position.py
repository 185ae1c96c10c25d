"""Tests for the sunrise and sunset calculation."""

from datetime import datetime, time, timedelta, timezone

import pytest

from energy_simulation.simulators import calculate_sunrise_sunset

CEST = timezone(timedelta(hours=2))
CET = timezone(timedelta(hours=1))


class TestCalculateSunriseSunset:
    """Tests for calculate_sunrise_sunset."""

    def test_summer_solstice_central_europe(self):
        """Test sunrise and sunset at 48N 10E on the longest day."""
        sunrise, sunset = calculate_sunrise_sunset(48, 10, datetime(2024, 6, 21, 12, 0, tzinfo=CEST))

        assert time(5, 10) <= sunrise.time() <= time(5, 30)
        assert time(21, 13) <= sunset.time() <= time(21, 33)

    def test_winter_solstice_central_europe(self):
        """Test sunrise and sunset at 48N 10E on the shortest day."""
        sunrise, sunset = calculate_sunrise_sunset(48, 10, datetime(2024, 12, 21, 12, 0, tzinfo=CET))

        assert time(7, 45) <= sunrise.time() <= time(8, 30)
        assert time(16, 0) <= sunset.time() <= time(16, 50)

    def test_summer_days_longer_than_winter_days(self):
        """Test day length follows the seasons in the northern hemisphere."""
        summer = calculate_sunrise_sunset(48, 10, datetime(2024, 6, 21, tzinfo=CEST))
        winter = calculate_sunrise_sunset(48, 10, datetime(2024, 12, 21, tzinfo=CET))

        assert summer[1] - summer[0] > winter[1] - winter[0]

    @pytest.mark.parametrize("latitude", [-60, -45, -30, -15, 0, 15, 30, 45, 60])
    @pytest.mark.parametrize("month", range(1, 13))
    def test_sunrise_before_sunset(self, latitude, month):
        """Test sunrise precedes sunset away from the poles."""
        sunrise, sunset = calculate_sunrise_sunset(latitude, 10, datetime(2024, month, 1, tzinfo=CET))
        assert sunrise < sunset

    def test_results_on_input_date_with_input_timezone(self):
        """Test results keep the date and tzinfo of the input."""
        when = datetime(2024, 3, 20, 23, 59, tzinfo=CET)
        sunrise, sunset = calculate_sunrise_sunset(48, 10, when)

        assert sunrise.date() == when.date()
        assert sunset.date() == when.date()
        assert sunrise.tzinfo is CET
        assert sunset.tzinfo is CET

    def test_minute_resolution(self):
        """Test seconds are truncated from the results."""
        sunrise, sunset = calculate_sunrise_sunset(48, 10, datetime(2024, 6, 21, tzinfo=CEST))

        assert sunrise.second == 0 and sunrise.microsecond == 0
        assert sunset.second == 0 and sunset.microsecond == 0

    def test_naive_datetime_uses_utc(self):
        """Test naive input is treated as UTC."""
        naive = calculate_sunrise_sunset(48, 10, datetime(2024, 6, 21, 12, 0))
        aware = calculate_sunrise_sunset(48, 10, datetime(2024, 6, 21, 12, 0, tzinfo=timezone.utc))

        assert naive[0].tzinfo is None
        assert naive[0].time() == aware[0].time()
        assert naive[1].time() == aware[1].time()

    def test_explicit_offset_overrides_timestamp(self):
        """Test an explicit UTC offset is used instead of the timestamp's."""
        explicit = calculate_sunrise_sunset(48, 10, datetime(2024, 6, 21, 12, 0), utc_offset_hours=2)
        aware = calculate_sunrise_sunset(48, 10, datetime(2024, 6, 21, 12, 0, tzinfo=CEST))

        assert explicit[0].time() == aware[0].time()
        assert explicit[1].time() == aware[1].time()

    def test_explicit_offset_with_aware_utc_timestamp(self):
        """Test an explicit offset on a UTC timestamp gives the same instants as local time."""
        utc = calculate_sunrise_sunset(
            48, 10, datetime(2024, 6, 21, 12, 0, tzinfo=timezone.utc), utc_offset_hours=2
        )
        local = calculate_sunrise_sunset(48, 10, datetime(2024, 6, 21, 12, 0, tzinfo=CEST))

        assert utc == local
        assert utc[0].tzinfo is timezone.utc
        assert time(3, 10) <= utc[0].time() <= time(3, 30)

    def test_explicit_offset_uses_local_date(self):
        """Test the date is taken in the configured offset, not in UTC."""
        late_utc = datetime(2024, 6, 20, 23, 0, tzinfo=timezone.utc)

        sunrise, sunset = calculate_sunrise_sunset(48, 10, late_utc, utc_offset_hours=2)
        expected = calculate_sunrise_sunset(48, 10, datetime(2024, 6, 21, 1, 0, tzinfo=CEST))

        assert (sunrise, sunset) == expected
        assert sunrise > late_utc

    def test_offset_shifts_local_time(self):
        """Test a one hour offset moves both events by one hour."""
        utc = calculate_sunrise_sunset(48, 10, datetime(2024, 6, 21, 12, 0, tzinfo=timezone.utc))
        cet = calculate_sunrise_sunset(48, 10, datetime(2024, 6, 21, 12, 0, tzinfo=CET))

        assert cet[0].hour == utc[0].hour + 1
        assert cet[0].minute == utc[0].minute

    def test_polar_day(self):
        """Test the midnight sun covers the whole date."""
        sunrise, sunset = calculate_sunrise_sunset(78, 15, datetime(2024, 6, 21, tzinfo=CEST))

        assert sunrise.time() == time(0, 0)
        assert sunset.time() == time(23, 59)

    def test_polar_night(self):
        """Test the polar night has no daylight at all."""
        sunrise, sunset = calculate_sunrise_sunset(78, 15, datetime(2024, 12, 21, tzinfo=CET))

        assert sunrise == sunset

    def test_pure_function(self):
        """Test repeated calls give identical results."""
        when = datetime(2024, 9, 1, 8, 30, tzinfo=CEST)
        assert calculate_sunrise_sunset(48, 10, when) == calculate_sunrise_sunset(48, 10, when)
