"""
Pool Snapshot Models.

Validated records for pool state fetched from outside the library (an
indexer, an RPC batch, a fixture file) and their conversion into RMMPool
instances the arbitrageur can evaluate.
"""
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from ..config.settings import settings
from .contracts import compute_engine_address
from .dex_protocols import CurveModel
from .precision import MAX_DECIMALS
from .rmm_pool import RMMPool


class PoolSnapshot(BaseModel):
    """Externally fetched state of one RMM pool."""

    model_config = {"frozen": True}

    # Tokens
    risky: str = Field(..., description="Risky token address")
    stable: str = Field(..., description="Stable token address")
    symbol_risky: str = Field(default="Risky", description="Risky token symbol")
    symbol_stable: str = Field(default="Stable", description="Stable token symbol")
    decimals_risky: int = Field(default=18, description="Risky token decimals", ge=0, le=MAX_DECIMALS)
    decimals_stable: int = Field(default=18, description="Stable token decimals", ge=0, le=MAX_DECIMALS)

    # Engine, given directly or derived from its factory
    engine: Optional[str] = Field(None, description="Engine contract address")
    factory: Optional[str] = Field(None, description="Factory that deployed the engine")
    engine_init_code_hash: Optional[str] = Field(None, description="keccak256 of the engine creation code")

    # Curve parameters
    strike: float = Field(..., description="Strike price in stable", gt=0)
    sigma: float = Field(..., description="Implied volatility", ge=0)
    maturity: int = Field(..., description="Maturity unix timestamp", ge=0)
    gamma: float = Field(..., description="1 - swap fee", gt=0, le=1)

    # Reserves
    reserve_risky: float = Field(..., description="Risky reserve in token units", ge=0)
    reserve_stable: float = Field(..., description="Stable reserve in token units", ge=0)
    liquidity: float = Field(..., description="Total pool liquidity", gt=0)
    invariant: float = Field(..., description="Invariant reported by the engine")

    last_timestamp: float = Field(..., description="Timestamp the state was read at", ge=0)

    @model_validator(mode="after")
    def check_engine_source(self) -> "PoolSnapshot":
        """An engine address or the factory data to derive it is required."""
        if self.engine is None and (self.factory is None or self.engine_init_code_hash is None):
            raise ValueError("Either engine or factory and engine_init_code_hash must be set")
        return self

    def resolve_engine(self) -> str:
        if self.engine is not None:
            return self.engine
        return compute_engine_address(self.factory, self.risky, self.stable, self.engine_init_code_hash)

    def to_pool(
        self,
        curve: Optional[CurveModel] = None,
        maturity_buffer: Optional[int] = None,
        invariant_slack: Optional[float] = None
    ) -> RMMPool:
        """
        Build the pool state for this snapshot.

        Args:
            curve: Curve model to price with, defaults to RMMCurveMath
            maturity_buffer: Seconds added to last_timestamp before computing
                time to maturity, defaults to the configured buffer
            invariant_slack: Tolerated invariant decrease, defaults to the
                configured slack

        Raises:
            InvalidPoolError: If the state violates the pool's invariants
        """
        extra = {}
        if curve is not None:
            extra["curve"] = curve

        return RMMPool(
            risky=self.risky,
            stable=self.stable,
            reserve_risky=self.reserve_risky,
            reserve_stable=self.reserve_stable,
            liquidity=self.liquidity,
            strike=self.strike,
            sigma=self.sigma,
            maturity=self.maturity,
            gamma=self.gamma,
            invariant=self.invariant,
            decimals_risky=self.decimals_risky,
            decimals_stable=self.decimals_stable,
            symbol_risky=self.symbol_risky,
            symbol_stable=self.symbol_stable,
            engine=self.resolve_engine(),
            last_timestamp=self.last_timestamp,
            maturity_buffer=settings.maturity_buffer_seconds if maturity_buffer is None else maturity_buffer,
            invariant_slack=settings.invariant_slack if invariant_slack is None else invariant_slack,
            **extra
        )
