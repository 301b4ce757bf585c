"""Shared pool fixtures for the unit tests."""
import math

import pytest
from scipy.stats import norm

from rmm_arbitrage.protocols.rmm_pool import DEFAULT_MATURITY_BUFFER, SECONDS_PER_YEAR, RMMPool

WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
ENGINE = "0x1111111111111111111111111111111111111111"
SNAPSHOT_TIME = 1_700_000_000


def curve_stable(risky: float, strike: float, sigma: float, tau: float) -> float:
    """Stable per liquidity sitting on the curve with a zero invariant."""
    return strike * norm.cdf(norm.ppf(1 - risky) - sigma * math.sqrt(tau))


@pytest.fixture
def make_pool():
    """Factory for a WETH/USDC pool sitting on the curve."""
    def _make(risky_per_liquidity=0.5, liquidity=10.0, strike=2000.0, sigma=1.0,
              tau=1.0, gamma=0.9985, **overrides):
        stable_per_liquidity = curve_stable(risky_per_liquidity, strike, sigma, tau)
        params = dict(
            risky=WETH,
            stable=USDC,
            reserve_risky=risky_per_liquidity * liquidity,
            reserve_stable=stable_per_liquidity * liquidity,
            liquidity=liquidity,
            strike=strike,
            sigma=sigma,
            maturity=int(SNAPSHOT_TIME + DEFAULT_MATURITY_BUFFER + tau * SECONDS_PER_YEAR),
            gamma=gamma,
            invariant=0.0,
            decimals_risky=18,
            decimals_stable=6,
            symbol_risky="WETH",
            symbol_stable="USDC",
            engine=ENGINE,
            last_timestamp=SNAPSHOT_TIME,
        )
        params.update(overrides)
        return RMMPool(**params)

    return _make


@pytest.fixture
def pool(make_pool):
    """One-year, 2000 strike pool holding half a unit of risky per liquidity."""
    return make_pool()
