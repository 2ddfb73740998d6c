"""FastAPI application factory for the ride-hailing API."""

import logging
import random
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from slowapi.errors import RateLimitExceeded

from ridehail import __version__, fixtures
from ridehail.ai.assistant import AIAssistant
from ridehail.ai.client import ChatCompletionClient
from ridehail.api.errors import register_exception_handlers
from ridehail.api.middleware.correlation import CorrelationIdMiddleware
from ridehail.api.middleware.security_headers import SecurityHeadersMiddleware
from ridehail.api.rate_limit import limiter, rate_limit_exceeded_handler
from ridehail.api.routes import admin, ai, auth, drivers, rides, users
from ridehail.auth.service import AuthService
from ridehail.auth.tokens import TokenService
from ridehail.rides.drivers import DriverDirectory
from ridehail.rides.fare import FareCalculator
from ridehail.rides.matching import AcceptanceScheduler
from ridehail.rides.service import RideLifecycleService
from ridehail.rides.store import InMemoryRideStore
from ridehail.rides.surge import SurgePolicy
from ridehail.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def build_ride_service(
    settings: Settings,
    rng: random.Random,
    clock: Callable[[], datetime] | None = None,
) -> tuple[RideLifecycleService, DriverDirectory]:
    """Wire the ride domain and load the demo rides and drivers."""
    store = InMemoryRideStore()
    store.load(fixtures.seed_rides())

    directory = DriverDirectory(clock=clock)
    for driver_id, lat, lng, heading, online in fixtures.SEED_DRIVERS:
        directory.update_location(driver_id, lat, lng, heading)
        directory.set_online(driver_id, online)

    service = RideLifecycleService(
        store=store,
        drivers=directory,
        fare_calculator=FareCalculator.from_settings(settings.pricing),
        surge_policy=SurgePolicy.from_settings(settings.pricing, rng=rng),
        scheduler=AcceptanceScheduler(),
        matching=settings.matching,
        driver_payout_share=settings.pricing.driver_payout_share,
        rng=rng,
        clock=clock,
    )
    return service, directory


def create_app(
    settings: Settings | None = None,
    rng: random.Random | None = None,
    clock: Callable[[], datetime] | None = None,
) -> FastAPI:
    """Create the FastAPI application with in-memory state seeded from fixtures.

    Args:
        settings: Loaded settings; read from the environment when omitted
        rng: Random source for surge, ETA and acceptance delays (seed it in tests)
        clock: Time source for ride and user timestamps
    """
    settings = settings or get_settings()
    rng = rng or random.Random()

    ride_service, directory = build_ride_service(settings, rng, clock)

    auth_service = AuthService(TokenService(settings.auth, clock=clock), clock=clock)
    auth_service.load(fixtures.seed_users())

    assistant = AIAssistant(ChatCompletionClient(settings.ai))

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Ride-hailing API starting (version %s)", __version__)
        yield
        ride_service.shutdown()
        logger.info("Ride-hailing API stopped")

    app = FastAPI(
        title="Ride-Hailing API",
        version=__version__,
        description="Fare estimates, ride booking and lifecycle, auth and AI assistant",
        lifespan=lifespan,
    )

    # Auto-instrument FastAPI (traces for all HTTP requests)
    FastAPIInstrumentor.instrument_app(app)

    # Auto-instrument HTTPX (traces outbound calls to the AI API)
    HTTPXClientInstrumentor().instrument()

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]
    register_exception_handlers(app)

    # Set dependencies immediately (not in lifespan) so they're available for testing
    app.state.settings = settings
    app.state.ride_service = ride_service
    app.state.driver_directory = directory
    app.state.auth_service = auth_service
    app.state.assistant = assistant

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins.split(","),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    app.include_router(auth.router, prefix="/api", tags=["auth"])
    app.include_router(ai.router, prefix="/api", tags=["ai"])
    app.include_router(rides.router, prefix="/rides", tags=["rides"])
    app.include_router(users.router, prefix="/users", tags=["users"])
    app.include_router(admin.router, prefix="/admin", tags=["admin"])
    app.include_router(drivers.router, prefix="/drivers", tags=["drivers"])

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint for monitoring (unauthenticated for infrastructure)."""
        return {"status": "healthy"}

    return app
