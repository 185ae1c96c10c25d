"""Sunrise and sunset times from the standard sunrise equation.

Implements the solar ephemeris approximation published in the Almanac for
Computers (1990), evaluated for the civil zenith of 90.8333 degrees.
"""

import logging
import math
from datetime import datetime, time, timedelta, timezone
from typing import Optional

logger = logging.getLogger(__name__)

CIVIL_ZENITH = 90.83333


def _normalize(value: float, period: int) -> float:
    """Wrap ``value`` into [0, period) keeping its fractional part."""
    return math.floor(value + period) % period + (value - math.floor(value))


def _sin(degrees: float) -> float:
    return math.sin(math.radians(degrees))


def _cos(degrees: float) -> float:
    return math.cos(math.radians(degrees))


def _cos_hour_angle(day_time: float, latitude: float) -> tuple[float, float]:
    """
    Compute the sun's right ascension and the cosine of its local hour angle.

    Args:
        day_time: Approximate time as fractional day of year
        latitude: Observer latitude in degrees

    Returns:
        Tuple of (right ascension in hours, cos of local hour angle)
    """
    # Sun's mean anomaly
    mean_anomaly = (0.9856 * day_time) - 3.289

    # Sun's true longitude
    true_longitude = _normalize(
        mean_anomaly
        + (1.916 * _sin(mean_anomaly))
        + (0.020 * _sin(2 * mean_anomaly))
        + 282.634,
        360,
    )

    # Right ascension, moved into the same quadrant as the true longitude
    right_ascension = _normalize(
        math.degrees(math.atan(0.91764 * math.tan(math.radians(true_longitude)))),
        360,
    )
    longitude_quadrant = math.floor(true_longitude / 90) * 90
    ascension_quadrant = math.floor(right_ascension / 90) * 90
    right_ascension = (right_ascension + (longitude_quadrant - ascension_quadrant)) / 15

    # Declination
    sin_declination = 0.39782 * _sin(true_longitude)
    cos_declination = math.cos(math.asin(sin_declination))

    cos_hour_angle = (
        _cos(CIVIL_ZENITH) - (sin_declination * _sin(latitude))
    ) / (cos_declination * _cos(latitude))

    return right_ascension, cos_hour_angle


def _local_event_hour(
    hour_angle: float,
    right_ascension: float,
    day_time: float,
    longitude_hour: float,
    utc_offset_hours: float,
) -> float:
    """Convert an hour angle into a local decimal hour in [0, 24)."""
    local_mean_time = hour_angle + right_ascension - (0.06571 * day_time) - 6.622
    universal_time = _normalize(local_mean_time - longitude_hour, 24)
    return _normalize(universal_time + utc_offset_hours, 24)


def _at_hour(when: datetime, decimal_hour: float) -> datetime:
    hour = math.floor(decimal_hour)
    minute = math.floor((decimal_hour - hour) * 60)
    return datetime.combine(when.date(), time(hour, minute), tzinfo=when.tzinfo)


def calculate_sunrise_sunset(
    latitude: float,
    longitude: float,
    when: datetime,
    utc_offset_hours: Optional[float] = None,
) -> tuple[datetime, datetime]:
    """
    Calculate sunrise and sunset on the local date of ``when``.

    The results carry the tzinfo of ``when`` and minute resolution. With
    an explicit ``utc_offset_hours`` and an aware ``when``, the local date
    is taken in that offset and the results are converted back to the
    tzinfo of ``when``.

    Polar night (the sun never rises) yields sunrise == sunset at local
    noon. Polar day (the sun never sets) yields 00:00 to 23:59.

    Args:
        latitude: Latitude in degrees, north positive
        longitude: Longitude in degrees, east positive
        when: Any time on the requested date
        utc_offset_hours: Offset of local time from UTC in hours. Defaults
            to the offset of ``when``, or 0 for naive datetimes.

    Returns:
        Tuple of (sunrise, sunset)
    """
    local = when
    if utc_offset_hours is None:
        offset = when.utcoffset()
        utc_offset_hours = offset.total_seconds() / 3600 if offset is not None else 0.0
    elif when.tzinfo is not None:
        local = when.astimezone(timezone(timedelta(hours=utc_offset_hours)))

    sunrise, sunset = _local_sunrise_sunset(latitude, longitude, local, utc_offset_hours)
    if local is not when:
        return sunrise.astimezone(when.tzinfo), sunset.astimezone(when.tzinfo)
    return sunrise, sunset


def _local_sunrise_sunset(
    latitude: float,
    longitude: float,
    local: datetime,
    utc_offset_hours: float,
) -> tuple[datetime, datetime]:
    """Sunrise and sunset as wall-clock times on the date of ``local``."""
    day_of_year = local.timetuple().tm_yday
    longitude_hour = longitude / 15

    rise_time = day_of_year + ((6 - longitude_hour) / 24)
    set_time = day_of_year + ((18 - longitude_hour) / 24)

    rise_ascension, cos_rise = _cos_hour_angle(rise_time, latitude)
    set_ascension, cos_set = _cos_hour_angle(set_time, latitude)

    if cos_rise > 1 or cos_set > 1:
        logger.debug("Polar night at latitude %.2f on %s", latitude, local.date())
        noon = _at_hour(local, 12)
        return noon, noon
    if cos_rise < -1 or cos_set < -1:
        logger.debug("Polar day at latitude %.2f on %s", latitude, local.date())
        return _at_hour(local, 0), datetime.combine(
            local.date(), time(23, 59), tzinfo=local.tzinfo
        )

    rise_hour_angle = (360 - math.degrees(math.acos(cos_rise))) / 15
    set_hour_angle = math.degrees(math.acos(cos_set)) / 15

    sunrise = _local_event_hour(
        rise_hour_angle, rise_ascension, rise_time, longitude_hour, utc_offset_hours
    )
    sunset = _local_event_hour(
        set_hour_angle, set_ascension, set_time, longitude_hour, utc_offset_hours
    )

    return _at_hour(local, sunrise), _at_hour(local, sunset)
