"""Centralized geographic distance calculations.

All distances in this service are expressed in statute miles, matching the
pricing table (per-mile rate) and the rider-facing estimates.
"""

from math import atan2, cos, radians, sin, sqrt

from ridehail.core.exceptions import ValidationError
from ridehail.core.rounding import round_half_up

EARTH_RADIUS_MILES = 3959.0

# Minutes of driving assumed per mile, and the floor applied to short trips
MINUTES_PER_MILE = 2.5
MINIMUM_DURATION_MINUTES = 5.0


def validate_coordinates(lat: float, lng: float, field: str = "coordinates") -> None:
    """Raise ValidationError unless lat is in [-90, 90] and lng in [-180, 180]."""
    if not -90.0 <= lat <= 90.0:
        raise ValidationError(
            f"Invalid latitude {lat} for {field}",
            details={"field": field, "lat": lat},
        )
    if not -180.0 <= lng <= 180.0:
        raise ValidationError(
            f"Invalid longitude {lng} for {field}",
            details={"field": field, "lng": lng},
        )


def haversine_distance_miles(
    lat1: float,
    lng1: float,
    lat2: float,
    lng2: float,
) -> float:
    """Calculate the great-circle distance between two points in miles.

    Uses the Haversine formula over a spherical Earth of radius 3959 miles.

    Args:
        lat1: Latitude of first point in degrees
        lng1: Longitude of first point in degrees
        lat2: Latitude of second point in degrees
        lng2: Longitude of second point in degrees

    Returns:
        Distance between the two points in miles, rounded to 2 decimals

    Raises:
        ValidationError: If any coordinate is out of range
    """
    validate_coordinates(lat1, lng1, "origin")
    validate_coordinates(lat2, lng2, "destination")

    lat1, lng1, lat2, lng2 = map(radians, [lat1, lng1, lat2, lng2])
    dlat = lat2 - lat1
    dlng = lng2 - lng1

    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlng / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return round_half_up(EARTH_RADIUS_MILES * c, 2)


def estimate_duration_minutes(distance_miles: float) -> float:
    """Estimated trip duration in minutes, never below the five-minute floor."""
    return max(distance_miles * MINUTES_PER_MILE, MINIMUM_DURATION_MINUTES)
