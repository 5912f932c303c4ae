"""
Application configuration using Pydantic settings.
"""
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Ellipse Computation Parameters
    ellipse_default_size: str = Field(
        default="1_STANDARD_DEVIATION",
        description="Ellipse size token used when a request does not name one"
    )
    ellipse_segments: int = Field(
        default=90,
        ge=4,
        description="Number of boundary vertices used to materialize each ellipse"
    )
    ellipse_missing_weight_policy: str = Field(
        default="exclude",
        description="Weight given to missing/non-numeric weight values: 'exclude' (0) or 'default' (1.0)"
    )
    ellipse_max_workers: int = Field(
        default=1,
        ge=1,
        description="Worker threads used to compute independent case groups"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Standard Deviational Ellipse Service",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
