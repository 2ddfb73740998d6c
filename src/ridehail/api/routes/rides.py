from fastapi import APIRouter

from ridehail.api.dependencies import CurrentUser, RideServiceDep
from ridehail.api.models.envelope import ApiResponse, ok
from ridehail.api.models.requests import RatingRequest, StatusUpdateRequest
from ridehail.auth.models import User, UserRole
from ridehail.core.exceptions import NotFoundError, PermissionDeniedError
from ridehail.rides.models import Ride, RideEstimate, RideRequest, RideStatus
from ridehail.rides.service import RideLifecycleService

router = APIRouter()


def _ride_not_found(ride_id: str) -> NotFoundError:
    return NotFoundError("Ride not found", details={"ride_id": ride_id}, code="RIDE_NOT_FOUND")


def _load_ride(service: RideLifecycleService, ride_id: str) -> Ride:
    ride = service.get_ride(ride_id)
    if ride is None:
        raise _ride_not_found(ride_id)
    return ride


def _is_party(user: User, ride: Ride) -> bool:
    return user.role == UserRole.ADMIN or user.id in (ride.passenger_id, ride.driver_id)


def _check_access(user: User, ride: Ride) -> None:
    if not _is_party(user, ride):
        raise PermissionDeniedError("Not allowed to access this ride", details={"ride_id": ride.id})


# Starting and finishing a trip belongs to its driver
DRIVER_STATUSES = frozenset({RideStatus.IN_PROGRESS, RideStatus.COMPLETED})


def _check_driver(user: User, ride: Ride) -> None:
    if user.role != UserRole.ADMIN and user.id != ride.driver_id:
        raise PermissionDeniedError(
            "Only the assigned driver can update this ride", details={"ride_id": ride.id}
        )


@router.post("/estimate", response_model=ApiResponse[RideEstimate])
async def estimate_ride(
    body: RideRequest, service: RideServiceDep, user: CurrentUser
) -> ApiResponse[RideEstimate]:
    return ok(service.estimate(body))


@router.post("", response_model=ApiResponse[Ride], status_code=201)
async def book_ride(
    body: RideRequest, service: RideServiceDep, user: CurrentUser
) -> ApiResponse[Ride]:
    """Book a ride for the caller. A driver accepts it automatically a few seconds later."""
    ride = service.book(body, user.id)
    return ok(ride, "Ride booked successfully")


@router.get("/{ride_id}", response_model=ApiResponse[Ride])
async def get_ride(ride_id: str, service: RideServiceDep, user: CurrentUser) -> ApiResponse[Ride]:
    ride = _load_ride(service, ride_id)
    _check_access(user, ride)
    return ok(ride)


@router.patch("/{ride_id}/status", response_model=ApiResponse[Ride])
async def update_ride_status(
    ride_id: str,
    body: StatusUpdateRequest,
    service: RideServiceDep,
    user: CurrentUser,
) -> ApiResponse[Ride]:
    ride = _load_ride(service, ride_id)
    driver_id = body.driver_id

    if body.status == RideStatus.ACCEPTED and ride.status == RideStatus.REQUESTED:
        # Any driver may claim an open ride; only admins may assign someone else
        if user.role == UserRole.DRIVER:
            if driver_id not in (None, user.id):
                raise PermissionDeniedError("Drivers can only accept rides for themselves")
            driver_id = user.id
        elif user.role != UserRole.ADMIN:
            raise PermissionDeniedError("Driver role required to accept a ride")
    elif body.status in DRIVER_STATUSES:
        _check_driver(user, ride)
    else:
        _check_access(user, ride)

    if not service.update_status(ride_id, body.status, driver_id=driver_id):
        raise _ride_not_found(ride_id)
    return ok(_load_ride(service, ride_id), f"Ride status updated to {body.status.value}")


@router.post("/{ride_id}/cancel", response_model=ApiResponse[Ride])
async def cancel_ride(ride_id: str, service: RideServiceDep, user: CurrentUser) -> ApiResponse[Ride]:
    ride = _load_ride(service, ride_id)
    _check_access(user, ride)
    if not service.cancel(ride_id):
        raise _ride_not_found(ride_id)
    return ok(_load_ride(service, ride_id), "Ride cancelled")


@router.post("/{ride_id}/rating", response_model=ApiResponse[Ride])
async def rate_ride(
    ride_id: str, body: RatingRequest, service: RideServiceDep, user: CurrentUser
) -> ApiResponse[Ride]:
    ride = service.rate(ride_id, user.id, body.rating, body.comment)
    if ride is None:
        raise _ride_not_found(ride_id)
    return ok(ride, "Thank you for your feedback")
