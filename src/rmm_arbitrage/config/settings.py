"""Arbitrage settings and configuration."""
from pydantic import Field
from pydantic_settings import BaseSettings


class ArbitrageSettings(BaseSettings):
    """Arbitrage settings loaded from environment variables."""

    # Sizing tolerances
    epsilon: float = Field(
        default=1e-4,
        description="Boundary guard tolerance and bisection width, in normalized units",
        gt=0,
        alias="RMM_EPSILON"
    )

    optimal_threshold: float = Field(
        default=1e-8,
        description="Minimum marginal price divergence from the reference price to trade",
        ge=0,
        alias="RMM_OPTIMAL_THRESHOLD"
    )

    max_bisection_iterations: int = Field(
        default=200,
        description="Iteration cap for bisection",
        gt=0,
        alias="RMM_MAX_BISECTION_ITERATIONS"
    )

    # Pool snapshot settings
    invariant_slack: float = Field(
        default=1e-9,
        description="Invariant decrease tolerated before a swap is logged as decreasing it",
        ge=0,
        alias="RMM_INVARIANT_SLACK"
    )

    maturity_buffer_seconds: int = Field(
        default=420,
        description="Seconds added to the snapshot time before computing time to maturity",
        ge=0,
        alias="RMM_MATURITY_BUFFER_SECONDS"
    )

    snapshot_tolerance: float = Field(
        default=1e-6,
        description="Allowed gap between reported and computed invariants",
        ge=0,
        alias="RMM_SNAPSHOT_TOLERANCE"
    )

    # Scanning
    scanner_max_workers: int = Field(
        default=4,
        description="Worker threads used to evaluate pools in parallel",
        gt=0,
        alias="RMM_SCANNER_MAX_WORKERS"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "populate_by_name": True,
        "extra": "ignore"  # Ignore extra fields from .env
    }


# Global settings instance
settings = ArbitrageSettings()
