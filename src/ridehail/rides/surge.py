import random

from ridehail.settings import PricingSettings


class SurgePolicy:
    """Discrete two-tier surge: standard most of the time, high with a fixed probability."""

    def __init__(
        self,
        standard: float = 1.0,
        high: float = 1.5,
        high_probability: float = 0.3,
        rng: random.Random | None = None,
    ) -> None:
        if standard < 1.0 or high < 1.0:
            raise ValueError("Surge multipliers must be >= 1.0")
        if not 0.0 <= high_probability <= 1.0:
            raise ValueError("high_probability must be within [0, 1]")
        self.standard = standard
        self.high = high
        self.high_probability = high_probability
        self._rng = rng or random.Random()

    @classmethod
    def from_settings(
        cls, pricing: PricingSettings, rng: random.Random | None = None
    ) -> "SurgePolicy":
        high = pricing.surge_very_high if pricing.surge_high_tier == "very_high" else pricing.surge_high
        return cls(
            standard=pricing.surge_standard,
            high=high,
            high_probability=pricing.surge_high_probability,
            rng=rng,
        )

    def draw(self) -> float:
        if self._rng.random() < self.high_probability:
            return self.high
        return self.standard
