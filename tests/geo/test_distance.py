"""Tests for the centralized distance utility."""

import math

import pytest

from ridehail.core.exceptions import ValidationError
from ridehail.geo.distance import (
    estimate_duration_minutes,
    haversine_distance_miles,
    validate_coordinates,
)
from tests.factories import BROOKLYN_BRIDGE, TIMES_SQUARE


@pytest.mark.unit
class TestHaversineDistanceMiles:
    def test_same_point_returns_zero(self) -> None:
        lat, lng = TIMES_SQUARE
        assert haversine_distance_miles(lat, lng, lat, lng) == 0.0

    def test_times_square_to_brooklyn_bridge(self) -> None:
        distance = haversine_distance_miles(*TIMES_SQUARE, *BROOKLYN_BRIDGE)
        assert distance == pytest.approx(3.64, abs=0.01)

    def test_rounded_to_two_decimals(self) -> None:
        distance = haversine_distance_miles(40.6413, -73.7781, 40.7831, -73.9712)
        assert distance == round(distance, 2)

    def test_symmetry(self) -> None:
        forward = haversine_distance_miles(*TIMES_SQUARE, *BROOKLYN_BRIDGE)
        backward = haversine_distance_miles(*BROOKLYN_BRIDGE, *TIMES_SQUARE)
        assert forward == backward

    def test_one_degree_of_latitude(self) -> None:
        # 3959 * pi / 180
        assert haversine_distance_miles(0.0, 0.0, 1.0, 0.0) == pytest.approx(69.10, abs=0.01)

    @pytest.mark.parametrize(
        "coords",
        [
            (91.0, 0.0, 0.0, 0.0),
            (0.0, 181.0, 0.0, 0.0),
            (0.0, 0.0, -90.5, 0.0),
            (0.0, 0.0, 0.0, -180.5),
            (math.nan, 0.0, 0.0, 0.0),
        ],
    )
    def test_out_of_range_coordinates_rejected(self, coords) -> None:
        with pytest.raises(ValidationError):
            haversine_distance_miles(*coords)

    def test_error_names_the_offending_point(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            haversine_distance_miles(0.0, 0.0, 95.0, 0.0)
        assert exc_info.value.details["field"] == "destination"


@pytest.mark.unit
class TestEstimateDuration:
    def test_scales_with_distance(self) -> None:
        assert estimate_duration_minutes(10.0) == 25.0

    def test_short_trips_floor_at_five_minutes(self) -> None:
        assert estimate_duration_minutes(0.0) == 5.0
        assert estimate_duration_minutes(1.5) == 5.0

    def test_boundary(self) -> None:
        assert estimate_duration_minutes(2.0) == 5.0
        assert estimate_duration_minutes(2.4) == pytest.approx(6.0)


@pytest.mark.unit
def test_validate_coordinates_accepts_bounds() -> None:
    validate_coordinates(90.0, 180.0)
    validate_coordinates(-90.0, -180.0)
