from fastapi import APIRouter

from ridehail.api.dependencies import AdminUser, RideServiceDep
from ridehail.api.models.envelope import ApiResponse, ok
from ridehail.rides.models import Ride, RideAnalytics

router = APIRouter()


@router.get("/rides/active", response_model=ApiResponse[list[Ride]])
async def list_active_rides(service: RideServiceDep, admin: AdminUser) -> ApiResponse[list[Ride]]:
    return ok(service.active_rides())


@router.get("/analytics", response_model=ApiResponse[RideAnalytics])
async def get_analytics(service: RideServiceDep, admin: AdminUser) -> ApiResponse[RideAnalytics]:
    return ok(service.analytics())
