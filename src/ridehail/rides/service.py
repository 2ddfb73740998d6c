"""Ride lifecycle orchestration: estimate, book, transition, history."""

import logging
import random
import uuid
from collections.abc import Callable
from datetime import UTC, datetime

from ridehail import metrics
from ridehail.core.exceptions import PermissionDeniedError, StateError, ValidationError
from ridehail.core.rounding import round_half_up
from ridehail.geo.distance import estimate_duration_minutes, haversine_distance_miles
from ridehail.ride_logging import log_ride_context
from ridehail.rides.drivers import DriverDirectory
from ridehail.rides.fare import FareCalculator
from ridehail.rides.matching import AcceptanceScheduler
from ridehail.rides.models import (
    Fare,
    Ride,
    RideAnalytics,
    RideEstimate,
    RideRating,
    RideRequest,
    RideStatus,
    TripHistory,
)
from ridehail.rides.store import RideRepository
from ridehail.rides.surge import SurgePolicy
from ridehail.settings import MatchingSettings

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class RideLifecycleService:
    """Owns every mutation of ride records after creation.

    Booking re-quotes the ride at commit time: the fare charged is computed
    again from the request, never taken from an earlier estimate, so an
    independent surge draw can make it differ from the quoted price.
    """

    def __init__(
        self,
        store: RideRepository,
        drivers: DriverDirectory,
        fare_calculator: FareCalculator | None = None,
        surge_policy: SurgePolicy | None = None,
        scheduler: AcceptanceScheduler | None = None,
        matching: MatchingSettings | None = None,
        driver_payout_share: float = 0.8,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._drivers = drivers
        self._rng = rng or random.Random()
        self._fare_calculator = fare_calculator or FareCalculator()
        self._surge_policy = surge_policy or SurgePolicy(rng=self._rng)
        self._scheduler = scheduler
        self._matching = matching or MatchingSettings()
        self._driver_payout_share = driver_payout_share
        self._clock = clock or (lambda: datetime.now(UTC))

    # ------------------------------------------------------------------
    # Quoting
    # ------------------------------------------------------------------

    def _quote(self, request: RideRequest) -> tuple[float, float, float, Fare]:
        pickup = request.pickup.coordinates
        destination = request.destination.coordinates
        distance = haversine_distance_miles(pickup.lat, pickup.lng, destination.lat, destination.lng)
        duration = estimate_duration_minutes(distance)
        surge_multiplier = self._surge_policy.draw()
        fare = self._fare_calculator.calculate(distance, duration, surge_multiplier)
        return distance, duration, surge_multiplier, fare

    def estimate(self, request: RideRequest) -> RideEstimate:
        """Non-committing preview of distance, duration and fare."""
        distance, duration, surge_multiplier, fare = self._quote(request)
        pickup = request.pickup.coordinates
        nearby = self._drivers.nearby(pickup.lat, pickup.lng, self._matching.nearby_radius_miles)
        return RideEstimate(
            distance=distance,
            duration=duration,
            fare=fare,
            surge_multiplier=surge_multiplier,
            available_drivers=len(nearby),
            estimated_arrival=self._rng.randint(
                self._matching.eta_min_minutes, self._matching.eta_max_minutes
            ),
        )

    # ------------------------------------------------------------------
    # Booking and transitions
    # ------------------------------------------------------------------

    def book(self, request: RideRequest, passenger_id: str) -> Ride:
        if not passenger_id:
            raise ValidationError("passenger_id is required", details={"field": "passenger_id"})

        distance, duration, surge_multiplier, fare = self._quote(request)
        ride = self._store.create(
            passenger_id=passenger_id,
            request=request,
            fare=fare,
            surge_multiplier=surge_multiplier,
            estimated_distance=distance,
            estimated_duration=duration,
            requested_at=self._clock(),
        )
        metrics.rides_booked.add(1, {"vehicle_type": ride.vehicle_type.value})

        with log_ride_context(ride.id, user_id=passenger_id):
            logger.info(
                "Ride booked: %.2f mi, %.1f min, total %.2f %s (surge %.1fx)",
                distance,
                duration,
                fare.total_fare,
                fare.currency,
                surge_multiplier,
            )

        if self._scheduler is not None:
            delay = self._rng.uniform(
                self._matching.accept_delay_min_seconds,
                self._matching.accept_delay_max_seconds,
            )
            self._scheduler.schedule(ride.id, delay, self._auto_accept)

        return ride

    def update_status(
        self, ride_id: str, new_status: RideStatus, driver_id: str | None = None
    ) -> bool:
        """Apply a status transition.

        Returns False when the ride does not exist. Illegal transitions raise
        StateError; repeating the current status is a no-op returning True.
        """
        current = self._store.get_by_id(ride_id)
        if current is None:
            return False
        if current.status == new_status:
            return True

        updated = self._store.update_status(
            ride_id, new_status, driver_id=driver_id, at=self._clock()
        )
        if updated is None:
            return False

        if current.status == RideStatus.REQUESTED and self._scheduler is not None:
            self._scheduler.cancel(ride_id)

        metrics.ride_transitions.add(1, {"status": new_status.value})
        with log_ride_context(ride_id, driver_id=updated.driver_id):
            logger.info("Ride %s: %s -> %s", ride_id, current.status.value, new_status.value)
        return True

    def cancel(self, ride_id: str) -> bool:
        return self.update_status(ride_id, RideStatus.CANCELLED)

    def _auto_accept(self, ride_id: str) -> None:
        ride = self._store.get_by_id(ride_id)
        if ride is None or ride.status != RideStatus.REQUESTED:
            return

        driver_id = self._pick_driver(ride)
        if driver_id is None:
            logger.warning("No online driver available to accept ride %s", ride_id)
            return

        try:
            self._store.update_status(
                ride_id,
                RideStatus.ACCEPTED,
                driver_id=driver_id,
                expected_status=RideStatus.REQUESTED,
                at=self._clock(),
            )
        except StateError:
            logger.info("Ride %s left requested before auto-accept fired", ride_id)
            return

        metrics.ride_transitions.add(1, {"status": RideStatus.ACCEPTED.value})
        with log_ride_context(ride_id, driver_id=driver_id):
            logger.info("Driver %s accepted ride %s", driver_id, ride_id)

    def _pick_driver(self, ride: Ride) -> str | None:
        busy = {r.driver_id for r in self._store.list_active() if r.driver_id}
        pickup = ride.pickup.coordinates
        for driver, _distance in self._drivers.nearby(
            pickup.lat, pickup.lng, self._matching.nearby_radius_miles
        ):
            if driver.driver_id not in busy and driver.driver_id != ride.passenger_id:
                return driver.driver_id

        candidates = [
            d.driver_id
            for d in self._drivers.online_drivers()
            if d.driver_id != ride.passenger_id
        ]
        if not candidates:
            return None
        idle = [d for d in candidates if d not in busy]
        return self._rng.choice(idle or candidates)

    def pending_acceptance(self, ride_id: str) -> bool:
        return self._scheduler is not None and self._scheduler.pending(ride_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_ride(self, ride_id: str) -> Ride | None:
        return self._store.get_by_id(ride_id)

    def history(self, user_id: str, page: int = 1, limit: int = 20) -> TripHistory:
        if page < 1:
            raise ValidationError("Page must be at least 1", details={"field": "page"})
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(
                f"Limit must be between 1 and {MAX_PAGE_SIZE}", details={"field": "limit"}
            )

        # Newest first; among equal timestamps the later-created ride wins
        user_rides = sorted(
            reversed(self._store.query_by_user(user_id)),
            key=lambda r: r.requested_at,
            reverse=True,
        )

        start = (page - 1) * limit
        page_rides = user_rides[start : start + limit]

        completed = [r for r in user_rides if r.status == RideStatus.COMPLETED]
        total_spent = sum(r.fare.total_fare for r in completed if r.passenger_id == user_id)
        total_earned = sum(
            r.fare.total_fare * self._driver_payout_share
            for r in completed
            if r.driver_id == user_id
        )
        rated = [r.rating.rating for r in completed if r.rating is not None]
        average_rating = sum(rated) / len(rated) if rated else 0.0

        return TripHistory(
            rides=page_rides,
            total_trips=len(user_rides),
            total_spent=round_half_up(total_spent, 2),
            total_earned=round_half_up(total_earned, 2),
            average_rating=round_half_up(average_rating, 1),
            page=page,
            limit=limit,
        )

    def rate(
        self, ride_id: str, rater_id: str, rating: int, comment: str | None = None
    ) -> Ride | None:
        """Attach the post-trip rating. Returns None when the ride does not exist."""
        ride = self._store.get_by_id(ride_id)
        if ride is None:
            return None
        if ride.status != RideStatus.COMPLETED:
            raise StateError(
                "Only completed rides can be rated",
                details={"ride_id": ride_id, "status": ride.status.value},
            )
        if rater_id == ride.passenger_id:
            rater_type = "passenger"
        elif rater_id == ride.driver_id:
            rater_type = "driver"
        else:
            raise PermissionDeniedError(
                "Only the passenger or driver of a ride can rate it",
                details={"ride_id": ride_id},
            )
        if ride.rating is not None:
            raise StateError("Ride has already been rated", details={"ride_id": ride_id})

        record = RideRating(
            id=f"rating_{uuid.uuid4().hex[:12]}",
            ride_id=ride_id,
            rater_id=rater_id,
            rater_type=rater_type,
            rating=rating,
            comment=comment,
            created_at=self._clock(),
        )
        return self._store.add_rating(ride_id, record)

    def active_rides(self) -> list[Ride]:
        return sorted(self._store.list_active(), key=lambda r: r.requested_at, reverse=True)

    def analytics(self) -> RideAnalytics:
        rides = self._store.list_all()
        completed = [r for r in rides if r.status == RideStatus.COMPLETED]
        cancelled = [r for r in rides if r.status == RideStatus.CANCELLED]
        active = [r for r in rides if not r.status.is_terminal]

        revenue = sum(r.fare.total_fare for r in completed)
        rated = [r.rating.rating for r in completed if r.rating is not None]

        return RideAnalytics(
            total_rides=len(rides),
            completed_rides=len(completed),
            cancelled_rides=len(cancelled),
            active_rides=len(active),
            total_revenue=round_half_up(revenue, 2),
            average_fare=round_half_up(revenue / len(completed), 2) if completed else 0.0,
            cancellation_rate=round_half_up(len(cancelled) / len(rides), 2) if rides else 0.0,
            average_rating=round_half_up(sum(rated) / len(rated), 1) if rated else 0.0,
            online_drivers=len(self._drivers.online_drivers()),
            active_passengers=len({r.passenger_id for r in active}),
        )

    def shutdown(self) -> None:
        if self._scheduler is not None:
            cancelled = self._scheduler.cancel_all()
            if cancelled:
                logger.info("Cancelled %d pending auto-accepts", cancelled)
