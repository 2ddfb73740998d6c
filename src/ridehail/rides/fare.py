from ridehail.core.exceptions import ValidationError
from ridehail.core.rounding import round_half_up
from ridehail.rides.models import Fare
from ridehail.settings import PricingSettings

BASE_FARE = 2.50
PER_MILE_RATE = 1.85
PER_MINUTE_RATE = 0.35
CURRENCY = "USD"


class FareCalculator:
    """Calculates ride fares from distance, duration and surge multiplier."""

    def __init__(
        self,
        base_fare: float = BASE_FARE,
        per_mile: float = PER_MILE_RATE,
        per_minute: float = PER_MINUTE_RATE,
        currency: str = CURRENCY,
    ) -> None:
        self.base_fare = base_fare
        self.per_mile = per_mile
        self.per_minute = per_minute
        self.currency = currency

    @classmethod
    def from_settings(cls, pricing: PricingSettings) -> "FareCalculator":
        return cls(
            base_fare=pricing.base_fare,
            per_mile=pricing.per_mile,
            per_minute=pricing.per_minute,
            currency=pricing.currency,
        )

    def calculate(
        self, distance_miles: float, duration_minutes: float, surge_multiplier: float = 1.0
    ) -> Fare:
        """
        Calculate the itemized fare for a ride.

        The surge component is the extra charged on top of the subtotal, so
        total = round2(subtotal * surge_multiplier).
        """
        if distance_miles < 0:
            raise ValidationError("Distance must be non-negative")
        if duration_minutes < 0:
            raise ValidationError("Duration must be non-negative")
        if surge_multiplier < 1.0:
            raise ValidationError("Surge multiplier must be >= 1.0")

        base_fare = self.base_fare
        distance_fare = distance_miles * self.per_mile
        time_fare = duration_minutes * self.per_minute

        subtotal = base_fare + distance_fare + time_fare
        surge_fare = subtotal * (surge_multiplier - 1)

        return Fare(
            base_fare=base_fare,
            distance_fare=distance_fare,
            time_fare=time_fare,
            surge_fare=surge_fare,
            total_fare=round_half_up(subtotal + surge_fare, 2),
            currency=self.currency,
        )


_default_calculator = FareCalculator()


def compute_fare(
    distance_miles: float, duration_minutes: float, surge_multiplier: float = 1.0
) -> Fare:
    """Fare at the standard published rates."""
    return _default_calculator.calculate(distance_miles, duration_minutes, surge_multiplier)
