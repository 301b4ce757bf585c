"""
RMM-01 Covered-Call Curve Math.

Implements the trading function of a replicating market maker whose
reserves track a covered call position:

    R2 = K * Phi(Phi^-1(1 - R1) - sigma * sqrt(tau)) + k

Where:
- R1 is the risky reserve per unit of liquidity, in (0, 1)
- R2 is the stable reserve per unit of liquidity, in (0, K)
- K is the strike, sigma the implied volatility, tau years to maturity
- k is the invariant
- Phi is the standard normal CDF

All reserves here are normalized (per unit of liquidity). Out-of-domain
inputs raise CurveDomainError; nothing is clamped.
"""
import math
from enum import Enum
from typing import Protocol

from scipy.stats import norm

from ..exceptions import CurveDomainError


class PoolSide(str, Enum):
    """Which asset of the pool a trade puts in."""
    RISKY = "risky"
    STABLE = "stable"

    @property
    def opposite(self) -> "PoolSide":
        return PoolSide.STABLE if self is PoolSide.RISKY else PoolSide.RISKY


class CurveModel(Protocol):
    """Numeric capability the pool queries are built on."""

    def stable_given_risky(self, risky: float, strike: float, sigma: float,
                           tau: float, invariant: float = 0.0) -> float:
        ...

    def risky_given_stable(self, stable: float, strike: float, sigma: float,
                           tau: float, invariant: float = 0.0) -> float:
        ...

    def invariant(self, risky: float, stable: float, strike: float,
                  sigma: float, tau: float) -> float:
        ...

    def marginal_price(self, side: PoolSide, amount_in: float, reserve: float,
                       strike: float, sigma: float, tau: float, fee: float,
                       invariant: float = 0.0) -> float:
        ...

    def spot_price(self, risky: float, strike: float, sigma: float,
                   tau: float) -> float:
        ...


class RMMCurveMath:
    """
    Closed-form RMM-01 curve evaluated with scipy's normal distribution.

    Both marginal prices are quoted in stable per risky: selling risky
    returns the stable received per marginal unit in, buying risky returns
    the stable paid per marginal unit out.
    """

    def quantile_prime(self, u: float) -> float:
        """
        Derivative of the standard normal quantile function.

        d/du Phi^-1(u) = 1 / phi(Phi^-1(u))
        """
        self._check_open_unit(u, "Quantile input")
        return float(1.0 / norm.pdf(norm.ppf(u)))

    def stable_given_risky(self, risky: float, strike: float, sigma: float,
                           tau: float, invariant: float = 0.0) -> float:
        """
        Stable reserve consistent with a risky reserve on the curve.

        Args:
            risky: Normalized risky reserve R1 in (0, 1)
            strike: Strike price K
            sigma: Implied volatility
            tau: Years until maturity
            invariant: Curve invariant k

        Returns:
            Normalized stable reserve R2
        """
        self._check_params(strike, sigma, tau)
        self._check_open_unit(risky, "Risky reserve")

        vol = sigma * math.sqrt(tau)
        return float(strike * norm.cdf(norm.ppf(1.0 - risky) - vol) + invariant)

    def risky_given_stable(self, stable: float, strike: float, sigma: float,
                           tau: float, invariant: float = 0.0) -> float:
        """
        Risky reserve consistent with a stable reserve on the curve.

        Args:
            stable: Normalized stable reserve R2, with (R2 - k) / K in (0, 1)
            strike: Strike price K
            sigma: Implied volatility
            tau: Years until maturity
            invariant: Curve invariant k

        Returns:
            Normalized risky reserve R1
        """
        self._check_params(strike, sigma, tau)
        scaled = (stable - invariant) / strike
        self._check_open_unit(scaled, "Scaled stable reserve")

        vol = sigma * math.sqrt(tau)
        return float(1.0 - norm.cdf(norm.ppf(scaled) + vol))

    def invariant(self, risky: float, stable: float, strike: float,
                  sigma: float, tau: float) -> float:
        """Invariant k implied by a pair of normalized reserves."""
        return stable - self.stable_given_risky(risky, strike, sigma, tau, 0.0)

    def marginal_price(self, side: PoolSide, amount_in: float, reserve: float,
                       strike: float, sigma: float, tau: float, fee: float,
                       invariant: float = 0.0) -> float:
        """
        Instantaneous price after `amount_in` has already been swapped in.

        Args:
            side: Asset being swapped in
            amount_in: Normalized amount already swapped in (before fee)
            reserve: Normalized reserve of the input asset before the swap
            strike: Strike price K
            sigma: Implied volatility
            tau: Years until maturity
            fee: Swap fee as a fraction, 1 - gamma
            invariant: Curve invariant k (used by the stable side)

        Returns:
            Marginal price in stable per risky
        """
        self._check_params(strike, sigma, tau)
        if amount_in < 0:
            raise CurveDomainError(f"Amount in cannot be negative: {amount_in}")
        if fee < 0 or fee >= 1:
            raise CurveDomainError(f"Fee must be within [0, 1), got {fee}")

        gamma = 1.0 - fee
        vol = sigma * math.sqrt(tau)

        if side is PoolSide.RISKY:
            risky = reserve + gamma * amount_in
            self._check_open_unit(risky, "Risky reserve")
            return float(
                gamma * strike * norm.pdf(norm.ppf(1.0 - risky) - vol)
                * self.quantile_prime(1.0 - risky)
            )

        scaled = (reserve + gamma * amount_in - invariant) / strike
        self._check_open_unit(scaled, "Scaled stable reserve")
        risky_per_stable = (
            gamma * norm.pdf(norm.ppf(scaled) + vol)
            * self.quantile_prime(scaled) / strike
        )
        return float(1.0 / risky_per_stable)

    def spot_price(self, risky: float, strike: float, sigma: float,
                   tau: float) -> float:
        """Fee-free price of the risky asset implied by the risky reserve."""
        return self.marginal_price(PoolSide.RISKY, 0.0, risky, strike, sigma, tau, 0.0)

    @staticmethod
    def _check_params(strike: float, sigma: float, tau: float):
        if not strike > 0:
            raise CurveDomainError(f"Strike must be positive, got {strike}")
        if not sigma >= 0:
            raise CurveDomainError(f"Volatility cannot be negative, got {sigma}")
        if not tau >= 0:
            raise CurveDomainError(f"Time to maturity cannot be negative, got {tau}")

    @staticmethod
    def _check_open_unit(value: float, name: str):
        # Also rejects NaN
        if not 0.0 < value < 1.0:
            raise CurveDomainError(f"{name} must be within (0, 1), got {value}")
