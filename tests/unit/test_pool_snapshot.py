"""Unit tests for pool snapshot ingestion."""
import pytest
from pydantic import ValidationError

from rmm_arbitrage.protocols.contracts import compute_engine_address
from rmm_arbitrage.protocols.exceptions import InvalidPoolError
from rmm_arbitrage.protocols.pool_snapshot import PoolSnapshot
from rmm_arbitrage.protocols.rmm_pool import SECONDS_PER_YEAR

WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
FACTORY = "0x5ca1e00004366ac85f492887aaab12d0e6418876"
ENGINE_CODE_HASH = "0x" + "ab" * 32


@pytest.fixture
def snapshot_data():
    """Pool record as returned by an indexer."""
    return {
        "risky": WETH.lower(),
        "stable": USDC.lower(),
        "symbol_risky": "WETH",
        "symbol_stable": "USDC",
        "decimals_risky": 18,
        "decimals_stable": 6,
        "engine": "0x1111111111111111111111111111111111111111",
        "strike": 2000.0,
        "sigma": 1.0,
        "maturity": 1_700_000_420 + SECONDS_PER_YEAR,
        "gamma": 0.9985,
        "reserve_risky": 5.0,
        "reserve_stable": 3173.105078,
        "liquidity": 10.0,
        "invariant": 0.0,
        "last_timestamp": 1_700_000_000,
    }


class TestPoolSnapshot:
    """Test PoolSnapshot validation and conversion."""

    def test_to_pool(self, snapshot_data):
        """A valid record becomes a pool with checksummed tokens."""
        pool = PoolSnapshot.model_validate(snapshot_data).to_pool()

        assert pool.risky == WETH
        assert pool.stable == USDC
        assert pool.maturity_buffer == 420
        assert pool.tau == pytest.approx(1.0)
        assert pool.symbol_risky == "WETH"

    def test_maturity_buffer_override(self, snapshot_data):
        """The block inclusion buffer can be set per conversion."""
        pool = PoolSnapshot(**snapshot_data).to_pool(maturity_buffer=0)

        assert pool.tau == pytest.approx(1.0 + 420 / SECONDS_PER_YEAR)

    def test_engine_from_factory(self, snapshot_data):
        """Without an engine address it is derived from the factory."""
        snapshot_data.pop("engine")
        snapshot = PoolSnapshot(**snapshot_data, factory=FACTORY, engine_init_code_hash=ENGINE_CODE_HASH)

        pool = snapshot.to_pool()

        assert pool.engine == compute_engine_address(FACTORY, WETH, USDC, ENGINE_CODE_HASH)

    def test_requires_engine_source(self, snapshot_data):
        """Either the engine or the factory data must be given."""
        snapshot_data.pop("engine")

        with pytest.raises(ValidationError):
            PoolSnapshot(**snapshot_data)

    @pytest.mark.parametrize("field,value", [
        ("gamma", 1.5),
        ("liquidity", 0.0),
        ("decimals_stable", 19),
        ("reserve_risky", -1.0),
    ])
    def test_field_constraints(self, snapshot_data, field, value):
        """Out-of-range fields fail validation."""
        snapshot_data[field] = value

        with pytest.raises(ValidationError):
            PoolSnapshot(**snapshot_data)

    def test_reserves_off_curve_domain(self, snapshot_data):
        """Reserves that pass field checks can still be an invalid pool."""
        snapshot_data["reserve_risky"] = 12.0

        with pytest.raises(InvalidPoolError):
            PoolSnapshot(**snapshot_data).to_pool()
