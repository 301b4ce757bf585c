"""
RMM Arbitrage Sizing.

Decides whether an RMM pool's marginal price diverges from an external
reference price by enough to trade, in which direction, and how much to
swap so the post-trade marginal price lands back on the reference price.

Sizing root-finds the marginal price, not the average price, then checks
the full swap with the pool's output query: the curve is convex, so a
trade that closes the marginal gap is not always profitable once slippage
over the whole size is paid.
"""
import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional

from ..config.settings import ArbitrageSettings
from ..protocols.dex_protocols import PoolSide
from ..protocols.exceptions import DomainViolationError, InvalidAmountError
from ..protocols.precision import truncate
from ..protocols.rmm_pool import RMMPool, SwapResult
from .bisection import solve_or_boundary
from .trade_models import NoTradeReason, TradeDecision, TradeDirection

logger = logging.getLogger(__name__)


@dataclass
class ArbitrageConfig:
    """Configuration for arbitrage sizing."""
    # Distance from any domain edge below which no trade is sized;
    # also the bisection tolerance, in normalized units
    epsilon: float = 1e-4

    # Minimum gap between marginal and reference price before trading
    optimal_threshold: float = 1e-8

    max_bisection_iterations: int = 200

    @classmethod
    def from_settings(cls, settings: ArbitrageSettings) -> "ArbitrageConfig":
        return cls(
            epsilon=settings.epsilon,
            optimal_threshold=settings.optimal_threshold,
            max_bisection_iterations=settings.max_bisection_iterations
        )


class Arbitrageur:
    """
    Sizes arbitrage trades against a single RMM pool snapshot.

    Each call to arbitrage() is a pure function of the reference price and
    the pool: nothing is kept between calls, so one instance can evaluate
    many pools concurrently.
    """

    def __init__(self, config: Optional[ArbitrageConfig] = None):
        """
        Initialize the arbitrageur.

        Args:
            config: Sizing tolerances, defaults to ArbitrageConfig()
        """
        self.config = config or ArbitrageConfig()

    def arbitrage(self, reference_price: float, pool: RMMPool) -> TradeDecision:
        """
        Evaluate a pool against an external price.

        Args:
            reference_price: Price of the risky asset in stable
            pool: Pool snapshot to trade against

        Returns:
            A sell-risky, buy-risky or no-trade decision
        """
        if not (math.isfinite(reference_price) and reference_price > 0):
            raise InvalidAmountError(
                f"Reference price must be positive and finite, got {reference_price}",
                pool_id=pool.pool_id
            )

        pool_id = pool.pool_id
        if pool.is_expired:
            logger.info(f"Pool {pool_id[:10]} has matured, skipping")
            return TradeDecision.no_trade(pool_id, reference_price, NoTradeReason.EXPIRED)

        if self._near_boundary(pool):
            return TradeDecision.no_trade(pool_id, reference_price, NoTradeReason.BOUNDARY)

        sell = pool.derivative_out(PoolSide.RISKY, 0)
        buy = pool.derivative_out(PoolSide.STABLE, 0)
        logger.debug(
            f"Pool {pool_id[:10]}: sell {pool.symbol_risky} at {sell}, "
            f"buy {pool.symbol_risky} at {buy}, reference {reference_price}"
        )

        threshold = self.config.optimal_threshold
        if sell > reference_price + threshold:
            logger.info(f"Selling {pool.symbol_risky} for {pool.symbol_stable} on pool {pool_id[:10]}")
            return self._sell_risky(reference_price, pool)

        if buy < reference_price - threshold:
            logger.info(f"Buying {pool.symbol_risky} with {pool.symbol_stable} on pool {pool_id[:10]}")
            return self._buy_risky(reference_price, pool)

        logger.info(f"No arb on pool {pool_id[:10]}: prices within threshold of {reference_price}")
        return TradeDecision.no_trade(pool_id, reference_price, NoTradeReason.THRESHOLD)

    def _near_boundary(self, pool: RMMPool) -> bool:
        """Whether the reserves sit too close to a domain edge to size safely."""
        eps = self.config.epsilon
        risky = pool.normalized_risky
        stable = pool.normalized_stable

        distances = [
            ("risky reserve", risky),
            ("stable reserve", stable),
            ("risky headroom", 1 - risky),
            ("stable headroom", pool.strike - stable),
        ]
        for name, distance in distances:
            if distance < eps:
                logger.info(f"Pool {pool.pool_id[:10]} {name} {distance} is below {eps}, skipping")
                return True

        # Only safe to evaluate once both reserves are known to be in range
        capacity = self._stable_capacity(pool)
        if capacity < eps:
            logger.info(f"Pool {pool.pool_id[:10]} stable capacity {capacity} is below {eps}, skipping")
            return True
        return False

    @staticmethod
    def _stable_capacity(pool: RMMPool) -> float:
        """Normalized stable that can still be swapped in before the curve's edge."""
        return (pool.strike + pool.invariant_approximation - pool.normalized_stable) / pool.gamma

    def _sell_risky(self, reference_price: float, pool: RMMPool) -> TradeDecision:
        eps = self.config.epsilon

        def marginal_gap(d: float) -> float:
            return pool.derivative_out(PoolSide.RISKY, d * pool.liquidity) - reference_price

        per_unit = self._size(marginal_gap, eps, 1 - pool.normalized_risky - eps)
        if per_unit is None:
            return TradeDecision.no_trade(pool.pool_id, reference_price, NoTradeReason.BOUNDARY)

        trade = truncate(per_unit * pool.liquidity, pool.decimals_risky)
        logger.debug(f"Per unit: {per_unit}, selling {trade} {pool.symbol_risky}")

        result = self._quote(pool, PoolSide.RISKY, trade)
        if result is None:
            return TradeDecision.no_trade(pool.pool_id, reference_price, NoTradeReason.BOUNDARY)

        profit = result.amount_out - trade * reference_price
        return self._decide(
            pool, reference_price, TradeDirection.SELL_RISKY, PoolSide.RISKY,
            trade, result.amount_out, profit
        )

    def _buy_risky(self, reference_price: float, pool: RMMPool) -> TradeDecision:
        eps = self.config.epsilon

        def marginal_gap(d: float) -> float:
            return reference_price - pool.derivative_out(PoolSide.STABLE, d * pool.liquidity)

        per_unit = self._size(marginal_gap, 0.0, self._stable_capacity(pool) - eps)
        if per_unit is None:
            return TradeDecision.no_trade(pool.pool_id, reference_price, NoTradeReason.BOUNDARY)

        trade = truncate(per_unit * pool.liquidity, pool.decimals_stable)
        logger.debug(f"Per unit: {per_unit}, paying {trade} {pool.symbol_stable}")

        result = self._quote(pool, PoolSide.STABLE, trade)
        if result is None:
            return TradeDecision.no_trade(pool.pool_id, reference_price, NoTradeReason.BOUNDARY)

        profit = result.amount_out * reference_price - trade
        return self._decide(
            pool, reference_price, TradeDirection.BUY_RISKY, PoolSide.STABLE,
            trade, result.amount_out, profit
        )

    def _size(self, marginal_gap: Callable[[float], float],
              lower: float, upper: float) -> Optional[float]:
        """Normalized trade size, or None when the bracket has collapsed."""
        if not lower < upper:
            logger.info(f"Sizing bracket [{lower}, {upper}] is empty, skipping")
            return None

        return solve_or_boundary(
            marginal_gap,
            lower,
            upper,
            tolerance=self.config.epsilon,
            max_iterations=self.config.max_bisection_iterations
        )

    @staticmethod
    def _quote(pool: RMMPool, side: PoolSide, trade: float) -> Optional[SwapResult]:
        """Swap result for the sized trade, or None when rounding pushes it off the curve."""
        try:
            return pool.amount_out(side, trade)
        except DomainViolationError as e:
            logger.info(f"Sized trade of {trade} {pool.symbol_of(side)} leaves the curve domain: {e}")
            return None

    @staticmethod
    def _decide(pool: RMMPool, reference_price: float, direction: TradeDirection,
                input_side: PoolSide, amount_in: float, amount_out: float,
                profit: float) -> TradeDecision:
        logger.info(
            f"Swap {amount_in} {pool.symbol_of(input_side)} for {amount_out} "
            f"{pool.symbol_of(input_side.opposite)}, profit {profit}"
        )
        if profit <= 0:
            logger.info(f"No arb on pool {pool.pool_id[:10]}: sized trade is not profitable")
            return TradeDecision.no_trade(pool.pool_id, reference_price, NoTradeReason.UNPROFITABLE)

        return TradeDecision(
            pool_id=pool.pool_id,
            reference_price=reference_price,
            direction=direction,
            input_side=input_side,
            input_asset=pool.token_of(input_side),
            output_asset=pool.token_of(input_side.opposite),
            amount_in=amount_in,
            expected_amount_out=amount_out,
            expected_profit=profit
        )
