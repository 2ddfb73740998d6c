"""FastAPI dependency injection providers."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ridehail.ai.assistant import AIAssistant
from ridehail.auth.models import User, UserRole
from ridehail.auth.service import AuthService
from ridehail.core.exceptions import AuthenticationError, PermissionDeniedError
from ridehail.rides.drivers import DriverDirectory
from ridehail.rides.service import RideLifecycleService

bearer_scheme = HTTPBearer(auto_error=False)


def get_ride_service(request: Request) -> RideLifecycleService:
    return request.app.state.ride_service


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_driver_directory(request: Request) -> DriverDirectory:
    return request.app.state.driver_directory


def get_assistant(request: Request) -> AIAssistant:
    return request.app.state.assistant


RideServiceDep = Annotated[RideLifecycleService, Depends(get_ride_service)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
DriverDirectoryDep = Annotated[DriverDirectory, Depends(get_driver_directory)]
AssistantDep = Annotated[AIAssistant, Depends(get_assistant)]


def get_current_user(
    auth: AuthServiceDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> User:
    """Resolve the bearer access token to a user, or fail with 401."""
    if credentials is None:
        raise AuthenticationError("Authentication required")
    user = auth.verify_token(credentials.credentials)
    if user is None:
        raise AuthenticationError("Invalid or expired token")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def require_role(role: UserRole) -> Callable[[User], User]:
    def dependency(user: CurrentUser) -> User:
        if not AuthService.has_permission(user, role):
            raise PermissionDeniedError(
                f"{role.value.capitalize()} role required",
                details={"required_role": role.value},
            )
        return user

    return dependency


AdminUser = Annotated[User, Depends(require_role(UserRole.ADMIN))]
DriverUser = Annotated[User, Depends(require_role(UserRole.DRIVER))]
