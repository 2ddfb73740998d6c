import os

# Credential fields have no defaults (the service must fail without secrets).
# Provide test values so Settings() can be constructed in tests.
os.environ.setdefault("AUTH_SECRET_KEY", "test-secret-key-not-for-production")

import random
from collections.abc import Callable

import pytest
from fastapi.testclient import TestClient

from ridehail import fixtures
from ridehail.api.app import create_app
from ridehail.api.rate_limit import limiter
from ridehail.rides.drivers import DriverDirectory
from ridehail.rides.fare import FareCalculator
from ridehail.rides.service import RideLifecycleService
from ridehail.rides.store import InMemoryRideStore
from ridehail.rides.surge import SurgePolicy
from ridehail.settings import AISettings, MatchingSettings, Settings
from tests.factories import ManualClock, RideRequestFactory, UserFactory


class RecordingScheduler:
    """Stands in for AcceptanceScheduler; callbacks run only when a test fires them."""

    def __init__(self) -> None:
        self.scheduled: dict[str, tuple[float, Callable[[str], None]]] = {}
        self.cancelled: list[str] = []

    def schedule(self, ride_id: str, delay: float, callback: Callable[[str], None]) -> None:
        self.scheduled[ride_id] = (delay, callback)

    def cancel(self, ride_id: str) -> bool:
        if self.scheduled.pop(ride_id, None) is None:
            return False
        self.cancelled.append(ride_id)
        return True

    def pending(self, ride_id: str) -> bool:
        return ride_id in self.scheduled

    def cancel_all(self) -> int:
        count = len(self.scheduled)
        self.scheduled.clear()
        return count

    def fire(self, ride_id: str) -> None:
        _, callback = self.scheduled.pop(ride_id)
        callback(ride_id)


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Rate limit counters are module-global; start every test with a clean slate."""
    limiter.reset()
    yield


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def ride_factory() -> RideRequestFactory:
    return RideRequestFactory(seed=42)


@pytest.fixture
def user_factory() -> UserFactory:
    return UserFactory(seed=42)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def store() -> InMemoryRideStore:
    return InMemoryRideStore()


@pytest.fixture
def driver_directory(clock: ManualClock) -> DriverDirectory:
    directory = DriverDirectory(clock=clock)
    for driver_id, lat, lng, heading, online in fixtures.SEED_DRIVERS:
        directory.update_location(driver_id, lat, lng, heading)
        directory.set_online(driver_id, online)
    return directory


@pytest.fixture
def scheduler() -> RecordingScheduler:
    return RecordingScheduler()


@pytest.fixture
def ride_service(
    store: InMemoryRideStore,
    driver_directory: DriverDirectory,
    scheduler: RecordingScheduler,
    rng: random.Random,
    clock: ManualClock,
) -> RideLifecycleService:
    """Service with surge switched off so fares are deterministic."""
    return RideLifecycleService(
        store=store,
        drivers=driver_directory,
        fare_calculator=FareCalculator(),
        surge_policy=SurgePolicy(high_probability=0.0, rng=rng),
        scheduler=scheduler,
        matching=MatchingSettings(),
        rng=rng,
        clock=clock,
    )


AI_TEST_URL = "http://ai.test/chat/completions"


@pytest.fixture
def api_settings() -> Settings:
    """Settings for API tests: upstream AI points at a mocked host, no retry backoff."""
    return Settings(ai=AISettings(base_url=AI_TEST_URL, retry_base_delay=0.0))


@pytest.fixture
def client(api_settings: Settings):
    app = create_app(api_settings, rng=random.Random(42))
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def login(client: TestClient) -> Callable[..., dict[str, str]]:
    """Log in through the API and return bearer headers."""

    def _login(email: str, password: str = fixtures.DEMO_PASSWORD) -> dict[str, str]:
        response = client.post(
            "/api/auth", json={"action": "login", "email": email, "password": password}
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['data']['token']}"}

    return _login


@pytest.fixture
def passenger_headers(login) -> dict[str, str]:
    return login("passenger@demo.com")


@pytest.fixture
def driver_headers(login) -> dict[str, str]:
    return login("driver@demo.com")


@pytest.fixture
def admin_headers(login) -> dict[str, str]:
    return login("admin@demo.com")
