from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PricingSettings(BaseSettings):
    base_fare: float = Field(default=2.50, ge=0.0)
    per_mile: float = Field(default=1.85, ge=0.0)
    per_minute: float = Field(default=0.35, ge=0.0)
    currency: str = "USD"

    # Surge tiers
    surge_standard: float = Field(default=1.0, ge=1.0)
    surge_high: float = Field(default=1.5, ge=1.0)
    surge_very_high: float = Field(default=2.0, ge=1.0)
    surge_high_tier: Literal["high", "very_high"] = Field(
        default="high",
        description="Tier applied when the surge draw lands in high demand",
    )
    surge_high_probability: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Probability that an estimate or booking is priced at the high tier",
    )

    # Share of a completed fare paid out to the driver
    driver_payout_share: float = Field(default=0.8, gt=0.0, le=1.0)

    model_config = SettingsConfigDict(env_prefix="PRICING_")


class MatchingSettings(BaseSettings):
    """Simulated driver matching configuration."""

    accept_delay_min_seconds: float = Field(default=3.0, ge=0.0)
    accept_delay_max_seconds: float = Field(default=8.0, ge=0.0)
    nearby_radius_miles: float = Field(
        default=5.0,
        gt=0.0,
        description="Radius used to count nearby drivers for estimates",
    )
    eta_min_minutes: int = Field(default=2, ge=0)
    eta_max_minutes: int = Field(default=10, ge=0)

    model_config = SettingsConfigDict(env_prefix="MATCHING_")

    @model_validator(mode="after")
    def validate_ranges(self) -> "MatchingSettings":
        if self.accept_delay_min_seconds > self.accept_delay_max_seconds:
            raise ValueError(
                f"accept_delay_min_seconds ({self.accept_delay_min_seconds}) must be "
                f"<= accept_delay_max_seconds ({self.accept_delay_max_seconds})"
            )
        if self.eta_min_minutes > self.eta_max_minutes:
            raise ValueError(
                f"eta_min_minutes ({self.eta_min_minutes}) must be "
                f"<= eta_max_minutes ({self.eta_max_minutes})"
            )
        return self


class AuthSettings(BaseSettings):
    secret_key: str = ""
    algorithm: str = "HS256"
    access_token_minutes: int = Field(default=60, ge=1)
    refresh_token_minutes: int = Field(default=60 * 24 * 7, ge=1)

    model_config = SettingsConfigDict(env_prefix="AUTH_")

    @model_validator(mode="after")
    def validate_credentials_provided(self) -> "AuthSettings":
        if not self.secret_key:
            raise ValueError("Required credential not provided: AUTH_SECRET_KEY")
        return self


class AISettings(BaseSettings):
    base_url: str = "https://oi-server.onrender.com/chat/completions"
    model: str = "openrouter/claude-sonnet-4"
    api_key: str = ""
    customer_id: str = ""
    timeout_seconds: float = Field(default=30.0, gt=0.0)
    max_retries: int = Field(default=3, ge=1, le=10)
    retry_base_delay: float = Field(default=1.0, ge=0.0, le=10.0)
    retry_multiplier: float = Field(default=2.0, ge=1.0, le=5.0)

    model_config = SettingsConfigDict(env_prefix="AI_")

    @field_validator("base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("AI base URL must start with http:// or https://")
        return v.rstrip("/")


class LoggingSettings(BaseSettings):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["text", "json"] = "text"
    environment: str = "development"

    model_config = SettingsConfigDict(env_prefix="LOG_")


class CORSSettings(BaseSettings):
    origins: str = "http://localhost:3000"

    model_config = SettingsConfigDict(env_prefix="CORS_")


class ServerSettings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 8000
    # Peers trusted to set X-Forwarded-For; passed to uvicorn
    forwarded_allow_ips: str = "127.0.0.1"

    model_config = SettingsConfigDict(env_prefix="SERVER_")


class Settings(BaseSettings):
    pricing: PricingSettings = Field(default_factory=PricingSettings)
    matching: MatchingSettings = Field(default_factory=MatchingSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    ai: AISettings = Field(default_factory=AISettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        case_sensitive=False,
    )


def get_settings() -> Settings:
    """Load and validate settings from environment variables."""
    return Settings()
