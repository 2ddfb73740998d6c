import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Body, Query, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError
from starlette.responses import JSONResponse

from ridehail.ai.assistant import FEATURES
from ridehail.api.dependencies import AssistantDep
from ridehail.api.models.envelope import failure_body, ok
from ridehail.api.models.requests import (
    AIHealth,
    CustomerSupportBody,
    DemandPredictionBody,
    RouteOptimizationBody,
)
from ridehail.api.rate_limit import AI_LIMIT, limiter
from ridehail.core.exceptions import TransientError, UpstreamError

logger = logging.getLogger(__name__)

router = APIRouter()


def _missing(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content=failure_body(message, "MISSING_PARAMETERS"))


def _success(data: Any) -> JSONResponse:
    return JSONResponse(
        status_code=200,
        content=ok(data).model_dump(mode="json", by_alias=True, exclude_none=True),
    )


@router.post("/ai")
@limiter.limit(AI_LIMIT)
async def ai_action(
    request: Request,
    assistant: AssistantDep,
    body: dict[str, Any] = Body(...),
) -> JSONResponse:
    payload = dict(body)
    action = payload.pop("action", None)

    try:
        if action == "route-optimization":
            route_body = RouteOptimizationBody.model_validate(payload)
            if route_body.origin is None or route_body.destination is None:
                return _missing("Origin and destination are required")
            route = await assistant.optimize_route(
                route_body.origin, route_body.destination, route_body.preferences
            )
            return _success(route)

        if action == "customer-support":
            support_body = CustomerSupportBody.model_validate(payload)
            reply = await assistant.customer_support(support_body.prompt, support_body.context)
            return _success(reply)

        if action == "demand-prediction":
            demand_body = DemandPredictionBody.model_validate(payload)
            if demand_body.location is None:
                return _missing("Location is required for demand prediction")
            prediction = await assistant.predict_demand(
                demand_body.location, demand_body.time_context
            )
            return _success(prediction)

    except PydanticValidationError as e:
        raise RequestValidationError(e.errors()) from e
    except (UpstreamError, TransientError) as e:
        logger.warning("AI %s failed: [%s] %s", action, e.code, e.message)
        return JSONResponse(status_code=400, content=failure_body(e.message, e.code))

    return JSONResponse(status_code=400, content=failure_body("Invalid action", "INVALID_ACTION"))


@router.get("/ai")
async def ai_status(action: str | None = Query(default=None)) -> JSONResponse:
    if action == "health":
        health = AIHealth(
            service="AI API",
            status="healthy",
            timestamp=datetime.now(UTC),
            features=FEATURES,
        )
        return _success(health)
    return JSONResponse(status_code=400, content=failure_body("Invalid action", "INVALID_ACTION"))
