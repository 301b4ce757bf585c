"""Trade sizing for RMM pools."""
from .arbitrageur import ArbitrageConfig, Arbitrageur
from .bisection import bisection, has_sign_change, solve_or_boundary
from .trade_models import NoTradeReason, TradeDecision, TradeDirection

__all__ = [
    "ArbitrageConfig",
    "Arbitrageur",
    "NoTradeReason",
    "TradeDecision",
    "TradeDirection",
    "bisection",
    "has_sign_change",
    "solve_or_boundary",
]
