"""Demo data loaded at start-up."""

from datetime import UTC, datetime

from ridehail.auth.models import User, UserRole
from ridehail.rides.models import (
    Coordinates,
    Fare,
    Location,
    PaymentMethod,
    Ride,
    RideRating,
    RideStatus,
    VehicleType,
)

DEMO_PASSWORD = "Password123!"

_SEED_CREATED = datetime(2024, 1, 1, tzinfo=UTC)


def _user(user_id: str, email: str, name: str, phone: str, role: UserRole) -> User:
    return User(
        id=user_id,
        email=email,
        name=name,
        phone=phone,
        role=role,
        is_verified=True,
        created_at=_SEED_CREATED,
        updated_at=_SEED_CREATED,
    )


def seed_users() -> list[tuple[User, str]]:
    """Demo accounts paired with their plaintext password."""
    return [
        (_user("1", "passenger@demo.com", "John Passenger", "+1234567890", UserRole.PASSENGER), DEMO_PASSWORD),
        (_user("2", "driver@demo.com", "Jane Driver", "+1234567891", UserRole.DRIVER), DEMO_PASSWORD),
        (_user("3", "admin@demo.com", "Admin User", "+1234567892", UserRole.ADMIN), DEMO_PASSWORD),
    ]


def _location(address: str, lat: float, lng: float) -> Location:
    return Location(address=address, coordinates=Coordinates(lat=lat, lng=lng))


def _at(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=UTC)


def seed_rides() -> list[Ride]:
    return [
        Ride(
            id="ride_001",
            passenger_id="1",
            driver_id="2",
            pickup=_location("123 Main St, New York, NY", 40.7589, -73.9851),
            destination=_location("456 Broadway, New York, NY", 40.7505, -73.9934),
            status=RideStatus.COMPLETED,
            vehicle_type=VehicleType.STANDARD,
            payment_method=PaymentMethod.CREDIT_CARD,
            fare=Fare(
                base_fare=2.50, distance_fare=3.70, time_fare=1.75, surge_fare=0.0, total_fare=7.95
            ),
            estimated_duration=15,
            estimated_distance=2.1,
            requested_at=_at("2024-01-15T10:30:00"),
            accepted_at=_at("2024-01-15T10:31:00"),
            started_at=_at("2024-01-15T10:35:00"),
            completed_at=_at("2024-01-15T10:50:00"),
            rating=RideRating(
                id="rating_001",
                ride_id="ride_001",
                rater_id="1",
                rater_type="passenger",
                rating=5,
                comment="Great ride, very professional driver!",
                created_at=_at("2024-01-15T10:52:00"),
            ),
        ),
        Ride(
            id="ride_002",
            passenger_id="1",
            driver_id="2",
            pickup=_location("789 Central Park West, New York, NY", 40.7794, -73.9632),
            destination=_location("321 Wall St, New York, NY", 40.7074, -74.0113),
            status=RideStatus.COMPLETED,
            vehicle_type=VehicleType.PREMIUM,
            payment_method=PaymentMethod.DIGITAL_WALLET,
            fare=Fare(
                base_fare=3.50, distance_fare=8.25, time_fare=3.15, surge_fare=2.48, total_fare=17.38
            ),
            estimated_duration=25,
            estimated_distance=4.5,
            requested_at=_at("2024-01-14T14:20:00"),
            accepted_at=_at("2024-01-14T14:21:30"),
            started_at=_at("2024-01-14T14:28:00"),
            completed_at=_at("2024-01-14T14:53:00"),
            rating=RideRating(
                id="rating_002",
                ride_id="ride_002",
                rater_id="1",
                rater_type="passenger",
                rating=4,
                comment="Good ride, arrived on time",
                created_at=_at("2024-01-14T14:55:00"),
            ),
        ),
        Ride(
            id="ride_003",
            passenger_id="1",
            pickup=_location("JFK Airport, Queens, NY", 40.6413, -73.7781),
            destination=_location("100 Manhattan Ave, New York, NY", 40.7831, -73.9712),
            status=RideStatus.REQUESTED,
            vehicle_type=VehicleType.XL,
            payment_method=PaymentMethod.CREDIT_CARD,
            fare=Fare(
                base_fare=4.00, distance_fare=18.50, time_fare=5.25, surge_fare=0.0, total_fare=27.75
            ),
            estimated_duration=45,
            estimated_distance=10.2,
            requested_at=_at("2024-01-16T09:15:00"),
            notes="Airport pickup - Terminal 4",
        ),
    ]


# driver_id, lat, lng, heading, online
SEED_DRIVERS: list[tuple[str, float, float, float, bool]] = [
    ("2", 40.7589, -73.9851, 45.0, True),
    ("4", 40.7505, -73.9934, 180.0, True),
    ("5", 40.7794, -73.9632, 270.0, True),
    ("6", 40.7074, -74.0113, 90.0, False),
]
