"""Unit tests for the trade decision record."""
import pytest
from pydantic import ValidationError

from rmm_arbitrage.optimization.trade_models import NoTradeReason, TradeDecision, TradeDirection
from rmm_arbitrage.protocols.dex_protocols import PoolSide

POOL_ID = "0x" + "12" * 32
WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"


def test_no_trade_has_zero_size():
    """No-trade decisions carry a reason and no size."""
    decision = TradeDecision.no_trade(POOL_ID, 1200.0, NoTradeReason.THRESHOLD)

    assert not decision.is_trade
    assert decision.direction is TradeDirection.NONE
    assert decision.amount_in == 0
    assert decision.expected_amount_out == 0


def test_no_trade_rejects_size():
    """A no-trade decision cannot carry an amount."""
    with pytest.raises(ValidationError):
        TradeDecision(pool_id=POOL_ID, reference_price=1200.0, amount_in=1.0)


def test_trade_requires_input():
    """A trade needs to say what is swapped in."""
    with pytest.raises(ValidationError):
        TradeDecision(
            pool_id=POOL_ID,
            reference_price=1200.0,
            direction=TradeDirection.SELL_RISKY,
            amount_in=1.0
        )


def test_trade_rejects_reason():
    """Trades do not carry a no-trade reason."""
    with pytest.raises(ValidationError):
        TradeDecision(
            pool_id=POOL_ID,
            reference_price=1200.0,
            direction=TradeDirection.SELL_RISKY,
            input_side=PoolSide.RISKY,
            input_asset=WETH,
            output_asset=USDC,
            amount_in=1.0,
            reason=NoTradeReason.UNPROFITABLE
        )


def test_decision_serializes():
    """Decisions dump to plain values for the execution layer."""
    decision = TradeDecision(
        pool_id=POOL_ID,
        reference_price=1200.0,
        direction=TradeDirection.BUY_RISKY,
        input_side=PoolSide.STABLE,
        input_asset=USDC,
        output_asset=WETH,
        amount_in=250.0,
        expected_amount_out=0.2,
        expected_profit=-10.0
    )

    data = decision.model_dump(mode="json")

    assert data["direction"] == "buy_risky"
    assert data["input_side"] == "stable"
    assert decision.is_trade
