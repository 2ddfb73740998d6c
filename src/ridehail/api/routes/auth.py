from typing import Any

from fastapi import APIRouter, Body, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError
from starlette.responses import JSONResponse

from ridehail.api.dependencies import AuthServiceDep
from ridehail.api.models.envelope import failure_body, ok
from ridehail.api.rate_limit import AUTH_LIMIT, limiter
from ridehail.auth.models import LoginRequest, SignupRequest
from ridehail.core.exceptions import InvalidCredentialsError, UserExistsError

router = APIRouter()


@router.post("/auth")
@limiter.limit(AUTH_LIMIT)
async def auth_action(
    request: Request,
    auth: AuthServiceDep,
    body: dict[str, Any] = Body(...),
) -> JSONResponse:
    """Login, signup or token refresh, selected by ``action``."""
    payload = dict(body)
    action = payload.pop("action", None)

    try:
        if action == "login":
            credentials = LoginRequest.model_validate(payload)
            result = auth.login(credentials.email, credentials.password)
            return _respond(200, ok(result, "Login successful"))

        if action == "signup":
            data = SignupRequest.model_validate(payload)
            result = auth.signup(data)
            return _respond(201, ok(result, "Account created successfully"))

        if action == "refresh":
            token = payload.get("refreshToken") or payload.get("refresh_token")
            refreshed = auth.refresh(token) if isinstance(token, str) else None
            if refreshed is None:
                return JSONResponse(
                    status_code=401,
                    content=failure_body("Invalid or expired refresh token", "UNAUTHORIZED"),
                )
            return _respond(200, ok(refreshed, "Token refreshed"))

    except PydanticValidationError as e:
        raise RequestValidationError(e.errors()) from e
    except (InvalidCredentialsError, UserExistsError) as e:
        return JSONResponse(status_code=400, content=failure_body(e.message, e.code))

    return JSONResponse(status_code=400, content=failure_body("Invalid action", "INVALID_ACTION"))


def _respond(status_code: int, envelope: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=envelope.model_dump(mode="json", by_alias=True, exclude_none=True),
    )
