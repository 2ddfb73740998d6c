from fastapi import APIRouter, Query

from ridehail.api.dependencies import AuthServiceDep, CurrentUser, RideServiceDep
from ridehail.api.models.envelope import ApiResponse, ok
from ridehail.auth.models import ProfileUpdate, User, UserRole
from ridehail.core.exceptions import PermissionDeniedError
from ridehail.rides.models import TripHistory

router = APIRouter()


@router.get("/me", response_model=ApiResponse[User])
async def get_profile(user: CurrentUser) -> ApiResponse[User]:
    return ok(user)


@router.patch("/me", response_model=ApiResponse[User])
async def update_profile(
    body: ProfileUpdate, auth: AuthServiceDep, user: CurrentUser
) -> ApiResponse[User]:
    updated = auth.update_profile(user.id, body)
    return ok(updated, "Profile updated successfully")


@router.get("/{user_id}/rides", response_model=ApiResponse[TripHistory])
async def get_trip_history(
    user_id: str,
    service: RideServiceDep,
    user: CurrentUser,
    page: int = Query(default=1),
    limit: int = Query(default=20),
) -> ApiResponse[TripHistory]:
    """Paginated trip history with spend, earnings and rating totals."""
    if user.id != user_id and user.role != UserRole.ADMIN:
        raise PermissionDeniedError("Not allowed to view another user's trips")
    return ok(service.history(user_id, page=page, limit=limit))
