"""Rate limiting configuration using slowapi."""

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ridehail import metrics
from ridehail.api.models.envelope import failure_body

AUTH_LIMIT = "10/minute"
AI_LIMIT = "20/minute"

WINDOW_SECONDS = {"second": 1, "minute": 60, "hour": 3600, "day": 86400}


def get_client_ip(request: Request) -> str:
    """Rate limit per connecting address.

    Forwarding headers are not read here. Behind a proxy, uvicorn rewrites the
    client address from X-Forwarded-For only for peers listed in
    SERVER_FORWARDED_ALLOW_IPS.
    """
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(key_func=get_client_ip)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """429 in the failure envelope, with a Retry-After header."""
    metrics.rate_limit_hits.add(
        1,
        {"endpoint": request.url.path, "method": request.method},
    )

    retry_after = "60"
    limit_text = str(exc.detail)
    for unit, seconds in WINDOW_SECONDS.items():
        if unit in limit_text:
            retry_after = str(seconds)
            break

    response = JSONResponse(
        status_code=429,
        content=failure_body(
            "Too many requests, please try again later",
            "RATE_LIMITED",
            {"limit": limit_text},
        ),
    )
    response.headers["retry-after"] = retry_after
    return response
