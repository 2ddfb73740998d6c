"""Prompt formatting and reply parsing for the three assistant features."""

import json
import logging
import re
from datetime import UTC, datetime
from typing import Any, Literal, TypeVar

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from ridehail.ai.client import ChatCompletionClient, ChatMessage
from ridehail.core.exceptions import UpstreamError
from ridehail.core.schema import CamelModel
from ridehail.rides.models import Coordinates

logger = logging.getLogger(__name__)

ReplyT = TypeVar("ReplyT", bound=CamelModel)

FEATURES = ["route-optimization", "customer-support", "demand-prediction"]

ROUTE_SYSTEM_PROMPT = """You are a route optimization expert. Given origin and destination coordinates,
provide optimal route suggestions with distance, duration, and turn-by-turn directions.
Always respond with valid JSON in the following format:
{
  "distance": number (in miles),
  "duration": number (in minutes),
  "route": [{"lat": number, "lng": number}],
  "instructions": ["string array of turn-by-turn directions"],
  "estimatedFuel": number (in gallons),
  "tollCost": number (optional)
}"""

SUPPORT_SYSTEM_PROMPT = """You are a helpful customer support assistant for RideShare, a ride-hailing platform.
Provide friendly, accurate, and concise responses to user queries.
If you cannot help with a specific issue, politely direct them to human support.
Keep responses under 200 words and maintain a professional, empathetic tone."""

DEMAND_SYSTEM_PROMPT = """You are a demand prediction expert for a ride-hailing service.
Analyze location and time context to predict ride demand.
Respond with JSON: {"demandLevel": "low|medium|high", "suggestedSurge": number}"""

_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class RoutePreferences(CamelModel):
    avoid_tolls: bool = False
    avoid_highways: bool = False
    optimize_for: Literal["time", "distance", "fuel"] = "time"


class OptimizedRoute(CamelModel):
    distance: float
    duration: float
    route: list[Coordinates] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    estimated_fuel: float | None = None
    toll_cost: float | None = None


class DemandPrediction(CamelModel):
    demand_level: Literal["low", "medium", "high"]
    suggested_surge: float


class AIReplyError(UpstreamError):
    """Upstream answered, but the reply is empty or not in the requested shape."""


def _flag(value: bool) -> str:
    return "true" if value else "false"


def parse_json_reply(content: str) -> Any:
    """Decode a JSON reply, tolerating a surrounding markdown code fence."""
    text = content.strip()
    match = _FENCE.match(text)
    if match:
        text = match.group(1)
    return json.loads(text)


class AIAssistant:
    def __init__(self, client: ChatCompletionClient) -> None:
        self._client = client

    async def optimize_route(
        self,
        origin: Coordinates,
        destination: Coordinates,
        preferences: RoutePreferences | None = None,
    ) -> OptimizedRoute:
        prefs = preferences or RoutePreferences()
        user_prompt = (
            f"Optimize route from {origin.lat},{origin.lng} to "
            f"{destination.lat},{destination.lng}.\n"
            f"Preferences: avoid tolls: {_flag(prefs.avoid_tolls)}, "
            f"avoid highways: {_flag(prefs.avoid_highways)}, "
            f"optimize for: {prefs.optimize_for}"
        )
        content = await self._client.chat(
            [
                ChatMessage(role="system", content=ROUTE_SYSTEM_PROMPT),
                ChatMessage(role="user", content=user_prompt),
            ]
        )
        return self._parse(content, OptimizedRoute, "Failed to parse route optimization response")

    async def customer_support(self, prompt: str, context: dict[str, Any] | None = None) -> str:
        user_prompt = f"User query: {prompt}"
        if context:
            user_prompt += f"\nContext: {json.dumps(context)}"
        content = await self._client.chat(
            [
                ChatMessage(role="system", content=SUPPORT_SYSTEM_PROMPT),
                ChatMessage(role="user", content=user_prompt),
            ],
            temperature=0.7,
            max_tokens=300,
        )
        if content is None:
            raise AIReplyError("No response generated", code="NO_CONTENT")
        return content

    async def predict_demand(
        self, location: Coordinates, time_context: str | None = None
    ) -> DemandPrediction:
        when = time_context or datetime.now(UTC).isoformat()
        content = await self._client.chat(
            [
                ChatMessage(role="system", content=DEMAND_SYSTEM_PROMPT),
                ChatMessage(
                    role="user",
                    content=f"Predict demand for location: {location.lat}, {location.lng} at {when}",
                ),
            ]
        )
        return self._parse(content, DemandPrediction, "Failed to parse demand prediction")

    @staticmethod
    def _parse(content: str | None, model: type[ReplyT], message: str) -> ReplyT:
        if content is None:
            raise AIReplyError("No response generated", code="NO_CONTENT")
        try:
            return model.model_validate(parse_json_reply(content))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.warning("%s: %s", message, e)
            raise AIReplyError(message, code="PARSE_ERROR") from e
