"""Ride state machine and models."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import Field

from ridehail.core.exceptions import StateError, ValidationError
from ridehail.core.schema import CamelModel


class RideStatus(str, Enum):
    """Ride lifecycle states."""

    REQUESTED = "requested"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset({RideStatus.COMPLETED, RideStatus.CANCELLED})

VALID_TRANSITIONS: dict[RideStatus, set[RideStatus]] = {
    RideStatus.REQUESTED: {RideStatus.ACCEPTED, RideStatus.CANCELLED},
    RideStatus.ACCEPTED: {RideStatus.IN_PROGRESS, RideStatus.CANCELLED},
    RideStatus.IN_PROGRESS: {RideStatus.COMPLETED, RideStatus.CANCELLED},
    RideStatus.COMPLETED: set(),
    RideStatus.CANCELLED: set(),
}

# Timestamp written when a ride enters each state
STATUS_TIMESTAMP_FIELDS: dict[RideStatus, str] = {
    RideStatus.ACCEPTED: "accepted_at",
    RideStatus.IN_PROGRESS: "started_at",
    RideStatus.COMPLETED: "completed_at",
    RideStatus.CANCELLED: "cancelled_at",
}


class VehicleType(str, Enum):
    STANDARD = "standard"
    PREMIUM = "premium"
    XL = "xl"
    LUXURY = "luxury"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    DIGITAL_WALLET = "digital_wallet"
    CASH = "cash"


class Coordinates(CamelModel):
    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)


class Location(CamelModel):
    address: str = Field(min_length=1)
    coordinates: Coordinates
    place_id: str | None = None


class Fare(CamelModel):
    """Itemized fare. Components are unrounded; the total is rounded to cents."""

    base_fare: float = Field(ge=0)
    distance_fare: float = Field(ge=0)
    time_fare: float = Field(ge=0)
    surge_fare: float = Field(ge=0)
    total_fare: float = Field(ge=0)
    currency: str = "USD"


class RideRating(CamelModel):
    """Rating submitted by passenger or driver after ride completion."""

    id: str
    ride_id: str
    rater_id: str
    rater_type: Literal["passenger", "driver"]
    rating: int = Field(ge=1, le=5)
    comment: str | None = Field(default=None, max_length=1000)
    created_at: datetime


class RideRequest(CamelModel):
    pickup: Location
    destination: Location
    vehicle_type: VehicleType
    payment_method: PaymentMethod
    notes: str | None = Field(default=None, max_length=500)


class RideEstimate(CamelModel):
    distance: float
    duration: float
    fare: Fare
    surge_multiplier: float
    available_drivers: int
    estimated_arrival: int


class Ride(CamelModel):
    """Ride record with state machine logic."""

    id: str
    passenger_id: str
    driver_id: str | None = None
    pickup: Location
    destination: Location
    status: RideStatus = Field(default=RideStatus.REQUESTED)
    vehicle_type: VehicleType
    payment_method: PaymentMethod
    fare: Fare
    surge_multiplier: float = Field(default=1.0, ge=1.0)
    estimated_duration: float  # minutes
    estimated_distance: float  # miles
    requested_at: datetime
    accepted_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    notes: str | None = None
    rating: RideRating | None = None

    def transition_to(
        self,
        new_status: RideStatus,
        at: datetime,
        driver_id: str | None = None,
    ) -> bool:
        """Move to ``new_status`` and stamp the matching timestamp.

        Returns False when the ride is already in ``new_status`` (nothing is
        changed), True when a transition happened.
        """
        if new_status == self.status:
            return False

        if self.status.is_terminal:
            raise StateError(
                f"Cannot transition from terminal state {self.status.value}",
                details={"ride_id": self.id, "from": self.status.value, "to": new_status.value},
            )

        if new_status not in VALID_TRANSITIONS[self.status]:
            raise StateError(
                f"Invalid transition from {self.status.value} to {new_status.value}",
                details={"ride_id": self.id, "from": self.status.value, "to": new_status.value},
            )

        if new_status == RideStatus.ACCEPTED:
            driver_id = driver_id or self.driver_id
            if not driver_id:
                raise ValidationError(
                    "A driver is required to accept a ride",
                    details={"ride_id": self.id, "field": "driver_id"},
                )
            self.driver_id = driver_id

        self.status = new_status
        setattr(self, STATUS_TIMESTAMP_FIELDS[new_status], at)
        return True


class TripHistory(CamelModel):
    rides: list[Ride]
    total_trips: int
    total_spent: float
    total_earned: float
    average_rating: float
    page: int
    limit: int


class RideAnalytics(CamelModel):
    """Aggregate figures for the admin dashboard."""

    total_rides: int
    completed_rides: int
    cancelled_rides: int
    active_rides: int
    total_revenue: float
    average_fare: float
    cancellation_rate: float
    average_rating: float
    online_drivers: int
    active_passengers: int
