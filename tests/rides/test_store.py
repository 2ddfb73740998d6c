from datetime import UTC, datetime

import pytest

from ridehail import fixtures
from ridehail.core.exceptions import StateError
from ridehail.rides.fare import compute_fare
from ridehail.rides.models import RideRating, RideStatus
from ridehail.rides.store import InMemoryRideStore
from tests.factories import RideRequestFactory

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


def _create(store: InMemoryRideStore, passenger_id: str = "1"):
    request = RideRequestFactory(seed=3).request()
    return store.create(
        passenger_id=passenger_id,
        request=request,
        fare=compute_fare(2.0, 5.0),
        surge_multiplier=1.0,
        estimated_distance=2.0,
        estimated_duration=5.0,
        requested_at=NOW,
    )


@pytest.mark.unit
class TestInMemoryRideStore:
    def test_create_assigns_unique_ids(self, store: InMemoryRideStore):
        first = _create(store)
        second = _create(store)

        assert first.id != second.id
        assert first.status == RideStatus.REQUESTED
        assert len(store) == 2

    def test_returns_copies(self, store: InMemoryRideStore):
        ride = _create(store)
        ride.status = RideStatus.CANCELLED

        assert store.get_by_id(ride.id).status == RideStatus.REQUESTED

    def test_get_unknown_returns_none(self, store: InMemoryRideStore):
        assert store.get_by_id("ride_missing") is None
        assert store.update_status("ride_missing", RideStatus.CANCELLED) is None

    def test_update_status_applies_transition(self, store: InMemoryRideStore):
        ride = _create(store)

        updated = store.update_status(ride.id, RideStatus.ACCEPTED, driver_id="2", at=NOW)

        assert updated.status == RideStatus.ACCEPTED
        assert updated.driver_id == "2"
        assert store.get_by_id(ride.id).accepted_at == NOW

    def test_rejected_transition_leaves_record_untouched(self, store: InMemoryRideStore):
        ride = _create(store)

        with pytest.raises(StateError):
            store.update_status(ride.id, RideStatus.COMPLETED)

        assert store.get_by_id(ride.id).status == RideStatus.REQUESTED

    def test_expected_status_compare_and_set(self, store: InMemoryRideStore):
        ride = _create(store)
        store.update_status(ride.id, RideStatus.CANCELLED)

        with pytest.raises(StateError):
            store.update_status(
                ride.id,
                RideStatus.ACCEPTED,
                driver_id="2",
                expected_status=RideStatus.REQUESTED,
            )
        assert store.get_by_id(ride.id).status == RideStatus.CANCELLED

    def test_query_by_user_matches_passenger_or_driver(self, store: InMemoryRideStore):
        store.load(fixtures.seed_rides())

        assert {r.id for r in store.query_by_user("1")} == {"ride_001", "ride_002", "ride_003"}
        assert {r.id for r in store.query_by_user("2")} == {"ride_001", "ride_002"}
        assert store.query_by_user("99") == []

    def test_list_active_excludes_terminal(self, store: InMemoryRideStore):
        store.load(fixtures.seed_rides())
        assert [r.id for r in store.list_active()] == ["ride_003"]

    def test_load_rejects_duplicate_ids(self, store: InMemoryRideStore):
        store.load(fixtures.seed_rides())
        with pytest.raises(ValueError):
            store.load(fixtures.seed_rides()[:1])

    def test_add_rating(self, store: InMemoryRideStore):
        ride = _create(store)
        rating = RideRating(
            id="rating_x",
            ride_id=ride.id,
            rater_id="1",
            rater_type="passenger",
            rating=4,
            created_at=NOW,
        )

        updated = store.add_rating(ride.id, rating)

        assert updated.rating.rating == 4
        assert store.add_rating("ride_missing", rating) is None

    def test_generated_ids_skip_loaded_ids(self, store: InMemoryRideStore):
        store.load([fixtures.seed_rides()[0].model_copy(update={"id": "ride_1"})])

        ride = _create(store)

        assert ride.id == "ride_2"
        assert len(store) == 2
