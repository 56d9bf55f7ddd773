"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from nutri_planner.domain.nutrition import ScalingLimits

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    environment: str = _ENVIRONMENT
    default_min_scale_factor: float = 0.5
    default_max_scale_factor: float = 2.0
    similarity_decay: float = 1.5
    candidate_limit: int = 20
    swap_limit: int = 30
    plan_write_retries: int = 2

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def default_scaling_limits(self) -> ScalingLimits:
        """Return the configured fallback scaling limits."""
        return ScalingLimits(
            min_scale_factor=self.default_min_scale_factor,
            max_scale_factor=self.default_max_scale_factor,
        )
