"""
Trade Decision Models.

Defines the record the arbitrageur hands to the execution layer. The
execution layer owns slippage tolerance, deadlines and gas; this record
only says what to swap and what the curve expects back.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from ..protocols.dex_protocols import PoolSide


class TradeDirection(str, Enum):
    """Terminal outcomes of an arbitrage evaluation."""
    NONE = "none"                   # No arbitrage
    SELL_RISKY = "sell_risky"       # Pool overprices risky: swap risky in
    BUY_RISKY = "buy_risky"         # Pool underprices risky: swap stable in


class NoTradeReason(str, Enum):
    """Why an evaluation ended without a trade."""
    EXPIRED = "expired"             # Pool matured, curve is degenerate
    BOUNDARY = "boundary"           # Reserves too close to a domain edge
    THRESHOLD = "threshold"         # Price divergence within the threshold band
    UNPROFITABLE = "unprofitable"   # Sized trade loses money after slippage


class TradeDecision(BaseModel):
    """Arbitrage decision for one pool against one reference price."""

    model_config = {"frozen": True}

    pool_id: str = Field(..., description="Pool the decision applies to")
    reference_price: float = Field(..., description="External price of risky in stable", gt=0)
    direction: TradeDirection = Field(default=TradeDirection.NONE, description="Trade direction")

    # Trade details, unset for no-trade decisions
    input_side: Optional[PoolSide] = Field(None, description="Pool side swapped in")
    input_asset: Optional[str] = Field(None, description="Token address swapped in")
    output_asset: Optional[str] = Field(None, description="Token address received")
    amount_in: float = Field(default=0.0, description="Amount of input asset", ge=0)
    expected_amount_out: float = Field(default=0.0, description="Curve output for amount_in", ge=0)
    expected_profit: float = Field(default=0.0, description="Profit in stable at the reference price")

    reason: Optional[NoTradeReason] = Field(None, description="Why no trade was made")

    @model_validator(mode="after")
    def check_outcome(self) -> "TradeDecision":
        """A no-trade decision carries no size, a trade carries one and no reason."""
        if self.direction is TradeDirection.NONE:
            if self.amount_in != 0 or self.expected_amount_out != 0:
                raise ValueError("No-trade decisions cannot carry a trade size")
        else:
            if self.input_side is None or self.input_asset is None:
                raise ValueError("Trade decisions need an input side and asset")
            if self.reason is not None:
                raise ValueError("Trade decisions cannot carry a no-trade reason")
        return self

    @property
    def is_trade(self) -> bool:
        return self.direction is not TradeDirection.NONE

    @classmethod
    def no_trade(cls, pool_id: str, reference_price: float,
                 reason: NoTradeReason) -> "TradeDecision":
        return cls(pool_id=pool_id, reference_price=reference_price, reason=reason)
