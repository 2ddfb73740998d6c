"""Tests for the ride status state machine."""

from datetime import UTC, datetime

import pytest

from ridehail.core.exceptions import StateError, ValidationError
from ridehail.rides.fare import compute_fare
from ridehail.rides.models import (
    VALID_TRANSITIONS,
    Ride,
    RideStatus,
)
from tests.factories import RideRequestFactory

T0 = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)
T1 = datetime(2025, 3, 1, 12, 5, tzinfo=UTC)


@pytest.fixture
def ride() -> Ride:
    request = RideRequestFactory(seed=1).request()
    return Ride(
        id="ride_1",
        passenger_id="1",
        pickup=request.pickup,
        destination=request.destination,
        vehicle_type=request.vehicle_type,
        payment_method=request.payment_method,
        fare=compute_fare(3.0, 7.5),
        estimated_distance=3.0,
        estimated_duration=7.5,
        requested_at=T0,
    )


@pytest.mark.unit
@pytest.mark.critical
class TestRideTransitions:
    def test_starts_requested(self, ride: Ride):
        assert ride.status == RideStatus.REQUESTED
        assert ride.driver_id is None

    def test_happy_path_stamps_each_timestamp(self, ride: Ride):
        assert ride.transition_to(RideStatus.ACCEPTED, T1, driver_id="2")
        assert ride.accepted_at == T1
        assert ride.driver_id == "2"

        assert ride.transition_to(RideStatus.IN_PROGRESS, T1)
        assert ride.started_at == T1

        assert ride.transition_to(RideStatus.COMPLETED, T1)
        assert ride.completed_at == T1
        assert ride.status.is_terminal

    def test_accept_requires_driver(self, ride: Ride):
        with pytest.raises(ValidationError):
            ride.transition_to(RideStatus.ACCEPTED, T1)
        assert ride.status == RideStatus.REQUESTED

    def test_same_status_is_a_no_op(self, ride: Ride):
        assert ride.transition_to(RideStatus.REQUESTED, T1) is False
        assert ride.accepted_at is None

    def test_cannot_skip_states(self, ride: Ride):
        with pytest.raises(StateError):
            ride.transition_to(RideStatus.COMPLETED, T1)

    @pytest.mark.parametrize("terminal", [RideStatus.COMPLETED, RideStatus.CANCELLED])
    def test_terminal_states_are_final(self, ride: Ride, terminal: RideStatus):
        ride.transition_to(RideStatus.ACCEPTED, T1, driver_id="2")
        ride.transition_to(RideStatus.IN_PROGRESS, T1)
        ride.transition_to(terminal, T1)

        for target in RideStatus:
            if target == terminal:
                continue
            with pytest.raises(StateError):
                ride.transition_to(target, T1)

    @pytest.mark.parametrize(
        "source", [RideStatus.REQUESTED, RideStatus.ACCEPTED, RideStatus.IN_PROGRESS]
    )
    def test_cancellable_from_every_active_state(self, source: RideStatus):
        assert RideStatus.CANCELLED in VALID_TRANSITIONS[source]

    def test_cancel_stamps_cancelled_at(self, ride: Ride):
        ride.transition_to(RideStatus.CANCELLED, T1)
        assert ride.cancelled_at == T1
        assert ride.completed_at is None


@pytest.mark.unit
def test_ride_serializes_camel_case(ride: Ride):
    data = ride.model_dump(mode="json", by_alias=True)

    assert data["passengerId"] == "1"
    assert data["fare"]["totalFare"] == ride.fare.total_fare
    assert data["requestedAt"].startswith("2025-03-01T12:00:00")
    assert "passenger_id" not in data
