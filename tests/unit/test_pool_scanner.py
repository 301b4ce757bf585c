"""Unit tests for parallel pool scanning."""
import logging

import pytest

from rmm_arbitrage.detection import PoolScanner
from rmm_arbitrage.optimization.trade_models import NoTradeReason, TradeDirection


@pytest.fixture
def pools(make_pool):
    """Pools at different maturities, all overpricing risky at 1100."""
    return [make_pool(tau=1.0), make_pool(tau=0.5), make_pool(tau=0.25), make_pool(tau=0.1)]


class TestPoolScanner:
    """Test PoolScanner."""

    def test_decisions_in_input_order(self, pools):
        """Decisions line up with the pools they were computed for."""
        report = PoolScanner(max_workers=4).scan(1100.0, pools)

        assert [decision.pool_id for decision in report.decisions] == [pool.pool_id for pool in pools]
        assert not report.failures
        assert all(decision.direction is TradeDirection.SELL_RISKY for decision in report.trades)
        assert len(report.trades) == len(pools)

    def test_independent_of_worker_count(self, pools):
        """Parallel and serial scans agree."""
        serial = PoolScanner(max_workers=1).scan(1100.0, pools)
        parallel = PoolScanner(max_workers=4).scan(1100.0, pools)

        assert serial.decisions == parallel.decisions

    def test_expired_pool_is_a_decision(self, make_pool):
        """A matured pool produces a no-trade decision, not a failure."""
        expired = make_pool(last_timestamp=2_000_000_000)

        report = PoolScanner().scan(1100.0, [make_pool(), expired])

        assert report.decisions[1].reason is NoTradeReason.EXPIRED
        assert len(report.trades) == 1
        assert not report.failures

    def test_inconsistent_snapshot_recorded_as_failure(self, make_pool, caplog):
        """Pools failing the snapshot check are reported, not sized."""
        good = make_pool()
        bad = make_pool(tau=0.75, invariant=0.5)
        scanner = PoolScanner(snapshot_tolerance=1e-6)

        with caplog.at_level(logging.ERROR, logger="rmm_arbitrage.detection.pool_scanner"):
            report = scanner.scan(1100.0, [good, bad])

        assert [decision.pool_id for decision in report.decisions] == [good.pool_id]
        assert [failure.pool_id for failure in report.failures] == [bad.pool_id]
        assert report.failures[0].index == 1
        assert "Failed to evaluate pool" in caplog.text

    def test_duplicate_pools_fail_separately(self, make_pool):
        """The same bad snapshot scanned twice is reported twice."""
        bad = make_pool(tau=0.75, invariant=0.5)
        scanner = PoolScanner(snapshot_tolerance=1e-6)

        report = scanner.scan(1100.0, [bad, make_pool(), bad])

        assert [failure.index for failure in report.failures] == [0, 2]
        assert all(failure.pool_id == bad.pool_id for failure in report.failures)
        assert scanner.stats["pools_failed"] == 2

    def test_stats(self, make_pool, pools):
        """Counters accumulate across scans."""
        scanner = PoolScanner(snapshot_tolerance=1e-6)

        scanner.scan(1100.0, pools)
        scanner.scan(1213.0, [make_pool(), make_pool(tau=0.75, invariant=0.5)])

        stats = scanner.get_stats()
        assert stats["scans"] == 2
        assert stats["pools_scanned"] == 6
        assert stats["trades_found"] == 4
        assert stats["pools_failed"] == 1

    def test_empty_scan(self):
        """Scanning nothing returns an empty report."""
        report = PoolScanner().scan(1100.0, [])

        assert report.decisions == []
        assert report.trades == []

    def test_rejects_zero_workers(self):
        """At least one worker is required."""
        with pytest.raises(ValueError):
            PoolScanner(max_workers=0)
