"""Ride repository: the single source of truth for ride records.

Callers only ever receive copies. Swapping the in-memory implementation for a
database-backed one needs no caller changes as long as it satisfies
``RideRepository``.
"""

import threading
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Protocol

from ridehail.core.exceptions import StateError
from ridehail.rides.models import Fare, Ride, RideRating, RideRequest, RideStatus


class RideRepository(Protocol):
    def create(
        self,
        *,
        passenger_id: str,
        request: RideRequest,
        fare: Fare,
        surge_multiplier: float,
        estimated_distance: float,
        estimated_duration: float,
        requested_at: datetime,
    ) -> Ride: ...

    def get_by_id(self, ride_id: str) -> Ride | None: ...

    def update_status(
        self,
        ride_id: str,
        status: RideStatus,
        *,
        driver_id: str | None = None,
        expected_status: RideStatus | None = None,
        at: datetime | None = None,
    ) -> Ride | None: ...

    def add_rating(self, ride_id: str, rating: RideRating) -> Ride | None: ...

    def query_by_user(self, user_id: str) -> list[Ride]: ...

    def list_active(self) -> list[Ride]: ...

    def list_all(self) -> list[Ride]: ...


class InMemoryRideStore:
    """Process-local ride repository.

    Thread-safe: every read and write happens under an RLock, so the timer
    callbacks and request handlers never observe a half-applied update.
    """

    def __init__(self, id_prefix: str = "ride_") -> None:
        self._lock = threading.RLock()
        self._rides: dict[str, Ride] = {}
        self._id_prefix = id_prefix
        self._counter = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._rides)

    def _next_id(self) -> str:
        # Skip over ids taken by loaded fixtures
        while True:
            self._counter += 1
            ride_id = f"{self._id_prefix}{self._counter}"
            if ride_id not in self._rides:
                return ride_id

    def create(
        self,
        *,
        passenger_id: str,
        request: RideRequest,
        fare: Fare,
        surge_multiplier: float,
        estimated_distance: float,
        estimated_duration: float,
        requested_at: datetime,
    ) -> Ride:
        with self._lock:
            ride = Ride(
                id=self._next_id(),
                passenger_id=passenger_id,
                pickup=request.pickup.model_copy(deep=True),
                destination=request.destination.model_copy(deep=True),
                status=RideStatus.REQUESTED,
                vehicle_type=request.vehicle_type,
                payment_method=request.payment_method,
                fare=fare,
                surge_multiplier=surge_multiplier,
                estimated_distance=estimated_distance,
                estimated_duration=estimated_duration,
                requested_at=requested_at,
                notes=request.notes,
            )
            self._rides[ride.id] = ride
            return ride.model_copy(deep=True)

    def load(self, rides: Iterable[Ride]) -> None:
        """Bulk-insert historical records (fixtures); ids are kept as given."""
        with self._lock:
            for ride in rides:
                if ride.id in self._rides:
                    raise ValueError(f"Duplicate ride id: {ride.id}")
                self._rides[ride.id] = ride.model_copy(deep=True)

    def get_by_id(self, ride_id: str) -> Ride | None:
        with self._lock:
            ride = self._rides.get(ride_id)
            return ride.model_copy(deep=True) if ride else None

    def update_status(
        self,
        ride_id: str,
        status: RideStatus,
        *,
        driver_id: str | None = None,
        expected_status: RideStatus | None = None,
        at: datetime | None = None,
    ) -> Ride | None:
        """Apply a status transition. Returns None when the ride does not exist.

        ``expected_status`` turns the update into a compare-and-set: if the
        ride has moved on, StateError is raised and nothing changes.
        """
        with self._lock:
            ride = self._rides.get(ride_id)
            if ride is None:
                return None
            if expected_status is not None and ride.status != expected_status:
                raise StateError(
                    f"Ride {ride_id} is {ride.status.value}, expected {expected_status.value}",
                    details={"ride_id": ride_id, "status": ride.status.value},
                )
            # Transition a copy so a rejected update leaves the record untouched
            updated = ride.model_copy(deep=True)
            updated.transition_to(status, at or datetime.now(UTC), driver_id=driver_id)
            self._rides[ride_id] = updated
            return updated.model_copy(deep=True)

    def add_rating(self, ride_id: str, rating: RideRating) -> Ride | None:
        with self._lock:
            ride = self._rides.get(ride_id)
            if ride is None:
                return None
            ride.rating = rating
            return ride.model_copy(deep=True)

    def query_by_user(self, user_id: str) -> list[Ride]:
        with self._lock:
            return [
                ride.model_copy(deep=True)
                for ride in self._rides.values()
                if ride.passenger_id == user_id or ride.driver_id == user_id
            ]

    def list_active(self) -> list[Ride]:
        with self._lock:
            return [
                ride.model_copy(deep=True)
                for ride in self._rides.values()
                if not ride.status.is_terminal
            ]

    def list_all(self) -> list[Ride]:
        with self._lock:
            return [ride.model_copy(deep=True) for ride in self._rides.values()]
