"""Request and response bodies that exist only at the HTTP boundary."""

from datetime import datetime
from typing import Any

from pydantic import Field

from ridehail.ai.assistant import RoutePreferences
from ridehail.core.schema import CamelModel
from ridehail.rides.models import Coordinates, RideStatus


class StatusUpdateRequest(CamelModel):
    status: RideStatus
    driver_id: str | None = None


class RatingRequest(CamelModel):
    rating: int = Field(ge=1, le=5)
    comment: str | None = Field(default=None, max_length=1000)


class DriverLocationUpdate(CamelModel):
    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)
    heading: float | None = Field(default=None, ge=0.0, lt=360.0)
    is_online: bool | None = None


class DriverLocationResponse(CamelModel):
    driver_id: str
    coordinates: Coordinates
    heading: float
    is_online: bool
    last_updated: datetime | None = None
    distance: float | None = None


class RouteOptimizationBody(CamelModel):
    origin: Coordinates | None = None
    destination: Coordinates | None = None
    preferences: RoutePreferences | None = None


class CustomerSupportBody(CamelModel):
    prompt: str = Field(min_length=1, max_length=4000)
    context: dict[str, Any] | None = None


class DemandPredictionBody(CamelModel):
    location: Coordinates | None = None
    time_context: str | None = None


class AIHealth(CamelModel):
    service: str
    status: str
    timestamp: datetime
    features: list[str]
