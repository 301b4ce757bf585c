"""
RMM Pool State.

An immutable snapshot of one RMM-01 curve instance, exposing swap output
and marginal price queries on top of the curve model. Reserve math is done
per unit of liquidity and every reserve fed back into the curve is
truncated to its token's decimal precision, as the settlement layer only
supports fixed-point amounts.
"""
import logging
import math
import time
from dataclasses import dataclass, field, replace
from functools import cached_property
from typing import Union

from eth_utils import to_checksum_address

from .contracts import PARAMETER_DECIMALS, ZERO_ADDRESS, compute_pool_id
from .dex_protocols import CurveModel, PoolSide, RMMCurveMath
from .exceptions import (
    InconsistentSnapshotError,
    InvalidAmountError,
    InvalidPoolError,
    InvalidTokenError,
    NegativeOutputError,
    NegativeReserveError,
    PoolExpiredError,
)
from .precision import MAX_DECIMALS, parse_units, truncate

logger = logging.getLogger(__name__)

SECONDS_PER_YEAR = 31_536_000

# Blocks take time to land; price off a slightly later timestamp
DEFAULT_MATURITY_BUFFER = 420

DEFAULT_INVARIANT_SLACK = 1e-9

# Relative gap between the curve-implied and current reserve treated as float noise
RESERVE_NOISE_TOLERANCE = 1e-12

TokenLike = Union[PoolSide, str]


@dataclass(frozen=True)
class SwapResult:
    """Outcome of a hypothetical swap against a pool snapshot."""
    input_side: PoolSide
    output_side: PoolSide
    output_token: str
    amount_in: float
    amount_out: float
    new_invariant: float
    implied_price: float  # average price paid, amount in per amount out


@dataclass(frozen=True)
class RMMPool:
    """State of an RMM-01 pool at a point in time."""
    risky: str
    stable: str
    reserve_risky: float
    reserve_stable: float
    liquidity: float
    strike: float
    sigma: float
    maturity: int  # unix timestamp
    gamma: float  # 1 - fee
    invariant: float  # as reported by the engine
    decimals_risky: int = 18
    decimals_stable: int = 18
    symbol_risky: str = "Risky"
    symbol_stable: str = "Stable"
    engine: str = ZERO_ADDRESS
    last_timestamp: float = field(default_factory=time.time)
    maturity_buffer: int = DEFAULT_MATURITY_BUFFER
    invariant_slack: float = DEFAULT_INVARIANT_SLACK
    curve: CurveModel = field(default_factory=RMMCurveMath, repr=False, compare=False)

    def __post_init__(self):
        for name in ("risky", "stable", "engine"):
            try:
                object.__setattr__(self, name, to_checksum_address(getattr(self, name)))
            except (TypeError, ValueError) as e:
                raise InvalidPoolError(f"Invalid {name} address {getattr(self, name)!r}: {e}")

        if self.risky == self.stable:
            raise InvalidPoolError(f"Risky and stable must differ, both are {self.risky}")
        if not self.liquidity > 0:
            raise InvalidPoolError(f"Liquidity must be positive, got {self.liquidity}")
        if not self.strike > 0:
            raise InvalidPoolError(f"Strike must be positive, got {self.strike}")
        if not self.sigma >= 0:
            raise InvalidPoolError(f"Volatility cannot be negative, got {self.sigma}")
        if not 0 < self.gamma <= 1:
            raise InvalidPoolError(f"Gamma must be within (0, 1], got {self.gamma}")
        if self.reserve_risky < 0 or self.reserve_stable < 0:
            raise InvalidPoolError(
                f"Reserves cannot be negative: {self.reserve_risky}, {self.reserve_stable}"
            )
        for decimals in (self.decimals_risky, self.decimals_stable):
            if not 0 <= decimals <= MAX_DECIMALS:
                raise InvalidPoolError(f"Decimals must be within [0, {MAX_DECIMALS}], got {decimals}")

        risky_per_liquidity = self.reserve_risky / self.liquidity
        stable_per_liquidity = self.reserve_stable / self.liquidity
        if not 0 < risky_per_liquidity < 1:
            raise InvalidPoolError(
                f"Risky reserve per liquidity must be within (0, 1), got {risky_per_liquidity}"
            )
        if not 0 < stable_per_liquidity < self.strike:
            raise InvalidPoolError(
                f"Stable reserve per liquidity must be within (0, {self.strike}), "
                f"got {stable_per_liquidity}"
            )

    @property
    def fee(self) -> float:
        return 1 - self.gamma

    @property
    def tau(self) -> float:
        """Years until maturity, measured from the buffered snapshot time."""
        now = self.last_timestamp + self.maturity_buffer
        return (self.maturity - now) / SECONDS_PER_YEAR

    @property
    def is_expired(self) -> bool:
        return self.tau <= 0

    @cached_property
    def pool_id(self) -> str:
        return compute_pool_id(
            self.engine,
            parse_units(self.strike, self.decimals_stable),
            parse_units(self.sigma, PARAMETER_DECIMALS),
            int(self.maturity),
            parse_units(self.gamma, PARAMETER_DECIMALS)
        )

    @cached_property
    def normalized_risky(self) -> float:
        """Risky reserve per unit of liquidity (R1)."""
        return truncate(self.reserve_risky / self.liquidity, self.decimals_risky)

    @cached_property
    def normalized_stable(self) -> float:
        """Stable reserve per unit of liquidity (R2)."""
        return truncate(self.reserve_stable / self.liquidity, self.decimals_stable)

    @cached_property
    def invariant_approximation(self) -> float:
        """Invariant implied by the current normalized reserves."""
        self._ensure_active()
        return self.curve.invariant(
            self.normalized_risky,
            self.normalized_stable,
            self.strike,
            self.sigma,
            self.tau
        )

    @property
    def spot_price(self) -> float:
        """Fee-free price of the risky asset in stable, as quoted by the curve."""
        self._ensure_active()
        return self.curve.spot_price(self.normalized_risky, self.strike, self.sigma, self.tau)

    def side_of(self, token: TokenLike) -> PoolSide:
        """Resolve a token address (or side) to the pool side it belongs to."""
        if isinstance(token, PoolSide):
            return token

        try:
            address = to_checksum_address(token)
        except (TypeError, ValueError):
            raise InvalidTokenError(f"Not a valid token: {token}", pool_id=self.pool_id)

        if address == self.risky:
            return PoolSide.RISKY
        if address == self.stable:
            return PoolSide.STABLE
        raise InvalidTokenError(f"Token {address} is not part of this pool", pool_id=self.pool_id)

    def token_of(self, side: PoolSide) -> str:
        return self.risky if side is PoolSide.RISKY else self.stable

    def symbol_of(self, side: PoolSide) -> str:
        return self.symbol_risky if side is PoolSide.RISKY else self.symbol_stable

    def decimals_of(self, side: PoolSide) -> int:
        return self.decimals_risky if side is PoolSide.RISKY else self.decimals_stable

    def amount_out(self, token: TokenLike, amount_in: float) -> SwapResult:
        """
        Output of swapping `amount_in` of one asset for the other.

        The fee is charged on the way in: only gamma * amount_in moves the
        curve, while the full amount lands in the post-trade reserves.

        Args:
            token: Input asset, as a PoolSide or token address
            amount_in: Amount of the input asset, in token units

        Returns:
            Swap result with output amount, post-trade invariant and the
            average price paid

        Raises:
            InvalidAmountError: If amount_in is negative
            DomainViolationError: If the trade is outside the curve's domain
        """
        side = self.side_of(token)
        self._check_amount(amount_in)
        self._ensure_active()

        k = self.invariant_approximation
        output_side = side.opposite
        decimals_in = self.decimals_of(side)
        decimals_out = self.decimals_of(output_side)

        if side is PoolSide.RISKY:
            reserve_in, reserve_out = self.reserve_risky, self.reserve_stable
        else:
            reserve_in, reserve_out = self.reserve_stable, self.reserve_risky

        adjusted_in = truncate((reserve_in + amount_in * self.gamma) / self.liquidity, decimals_in)
        logger.debug(
            f"Input adjusted reserve rounding: "
            f"{(reserve_in + amount_in * self.gamma) / self.liquidity - adjusted_in}"
        )

        if side is PoolSide.RISKY:
            implied_out = self.curve.stable_given_risky(
                adjusted_in, self.strike, self.sigma, self.tau, k
            )
        else:
            implied_out = self.curve.risky_given_stable(
                adjusted_in, self.strike, self.sigma, self.tau, k
            )

        if implied_out < 0:
            raise NegativeReserveError(implied_out, pool_id=self.pool_id)

        implied_reserve = implied_out * self.liquidity
        if math.isclose(implied_reserve, reserve_out, rel_tol=RESERVE_NOISE_TOLERANCE):
            implied_reserve = reserve_out

        output = truncate(reserve_out - implied_reserve, decimals_out)
        logger.debug(f"Output rounding: {reserve_out - implied_reserve - output}")
        if output < 0:
            raise NegativeOutputError(output, pool_id=self.pool_id)

        post_in = truncate((reserve_in + amount_in) / self.liquidity, decimals_in)
        post_out = truncate((reserve_out - output) / self.liquidity, decimals_out)
        if side is PoolSide.RISKY:
            new_invariant = self.curve.invariant(post_in, post_out, self.strike, self.sigma, self.tau)
        else:
            new_invariant = self.curve.invariant(post_out, post_in, self.strike, self.sigma, self.tau)

        if new_invariant < k - self.invariant_slack:
            logger.warning(
                f"Invariant decreased from {k} to {new_invariant} "
                f"swapping {amount_in} {self.symbol_of(side)} on pool {self.pool_id[:10]}"
            )

        if amount_in == 0 or output == 0:
            implied_price = math.inf
        else:
            implied_price = amount_in / output

        return SwapResult(
            input_side=side,
            output_side=output_side,
            output_token=self.token_of(output_side),
            amount_in=amount_in,
            amount_out=output,
            new_invariant=new_invariant,
            implied_price=implied_price
        )

    def derivative_out(self, token: TokenLike, amount_in: float) -> float:
        """
        Marginal price after hypothetically swapping in `amount_in`.

        Unlike SwapResult.implied_price this is the instantaneous price at
        that point of the trade, in stable per risky for both sides.
        """
        side = self.side_of(token)
        self._check_amount(amount_in)
        self._ensure_active()

        if side is PoolSide.RISKY:
            reserve = self.normalized_risky
        else:
            reserve = self.normalized_stable

        return self.curve.marginal_price(
            side,
            amount_in / self.liquidity,
            reserve,
            self.strike,
            self.sigma,
            self.tau,
            self.fee,
            invariant=self.invariant_approximation
        )

    def apply_swap(self, result: SwapResult) -> "RMMPool":
        """New snapshot with the reserves left behind by a swap."""
        if result.input_side is PoolSide.RISKY:
            reserve_risky = self.reserve_risky + result.amount_in
            reserve_stable = self.reserve_stable - result.amount_out
        else:
            reserve_risky = self.reserve_risky - result.amount_out
            reserve_stable = self.reserve_stable + result.amount_in

        return replace(
            self,
            reserve_risky=reserve_risky,
            reserve_stable=reserve_stable,
            invariant=result.new_invariant
        )

    def validate_consistency(self, tolerance: float):
        """
        Check the reported invariant against the one implied by the reserves.

        Raises:
            InconsistentSnapshotError: If they differ by more than tolerance
        """
        computed = self.invariant_approximation
        if abs(computed - self.invariant) > tolerance:
            logger.warning(
                f"Pool {self.pool_id[:10]} reports invariant {self.invariant}, "
                f"reserves imply {computed}"
            )
            raise InconsistentSnapshotError(
                self.invariant, computed, tolerance, pool_id=self.pool_id
            )

    def _check_amount(self, amount_in: float):
        if not amount_in >= 0:
            raise InvalidAmountError(f"Amount in cannot be negative: {amount_in}", pool_id=self.pool_id)

    def _ensure_active(self):
        if self.is_expired:
            raise PoolExpiredError(
                f"Pool matured at {self.maturity}, snapshot taken at {self.last_timestamp}",
                pool_id=self.pool_id
            )
