from fastapi import APIRouter, Query

from ridehail.api.dependencies import CurrentUser, DriverDirectoryDep, DriverUser
from ridehail.api.models.envelope import ApiResponse, ok
from ridehail.api.models.requests import DriverLocationResponse, DriverLocationUpdate
from ridehail.auth.models import UserRole
from ridehail.core.exceptions import PermissionDeniedError
from ridehail.rides.drivers import DriverLocation
from ridehail.rides.models import Coordinates

router = APIRouter()


def _to_response(driver: DriverLocation, distance: float | None = None) -> DriverLocationResponse:
    return DriverLocationResponse(
        driver_id=driver.driver_id,
        coordinates=Coordinates(lat=driver.lat, lng=driver.lng),
        heading=driver.heading,
        is_online=driver.is_online,
        last_updated=driver.last_updated,
        distance=distance,
    )


@router.put("/{driver_id}/location", response_model=ApiResponse[DriverLocationResponse])
async def update_driver_location(
    driver_id: str,
    body: DriverLocationUpdate,
    directory: DriverDirectoryDep,
    user: DriverUser,
) -> ApiResponse[DriverLocationResponse]:
    if user.id != driver_id and user.role != UserRole.ADMIN:
        raise PermissionDeniedError("Drivers can only update their own location")

    directory.update_location(driver_id, body.lat, body.lng, body.heading)
    if body.is_online is not None:
        directory.set_online(driver_id, body.is_online)
    return ok(_to_response(directory.get(driver_id)))


@router.get("/nearby", response_model=ApiResponse[list[DriverLocationResponse]])
async def list_nearby_drivers(
    directory: DriverDirectoryDep,
    user: CurrentUser,
    lat: float = Query(ge=-90.0, le=90.0),
    lng: float = Query(ge=-180.0, le=180.0),
    radius: float = Query(default=5.0, gt=0.0, le=50.0),
) -> ApiResponse[list[DriverLocationResponse]]:
    nearby = directory.nearby(lat, lng, radius)
    return ok([_to_response(driver, distance) for driver, distance in nearby])
