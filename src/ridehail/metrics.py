"""OpenTelemetry instruments. No-ops unless an SDK meter provider is installed."""

from opentelemetry import metrics

meter = metrics.get_meter("ridehail")

rides_booked = meter.create_counter(
    name="rides_booked_total",
    description="Total rides booked",
    unit="1",
)

ride_transitions = meter.create_counter(
    name="ride_status_transitions_total",
    description="Ride status transitions applied, by target status",
    unit="1",
)

rate_limit_hits = meter.create_counter(
    name="api_rate_limit_hits_total",
    description="Total API requests rejected by rate limiting",
    unit="1",
)

ai_requests = meter.create_counter(
    name="ai_requests_total",
    description="Chat-completion calls to the upstream AI API, by outcome",
    unit="1",
)
