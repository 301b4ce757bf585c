"""
Pool Scanner.

Evaluates a batch of pool snapshots against one reference price in
parallel. Every evaluation is a pure function of its snapshot, so pools
are fanned out to a thread pool and the results gathered back in input
order.
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..config.settings import ArbitrageSettings
from ..optimization.arbitrageur import ArbitrageConfig, Arbitrageur
from ..optimization.trade_models import TradeDecision
from ..protocols.exceptions import RMMArbitrageError
from ..protocols.rmm_pool import RMMPool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanFailure:
    """A pool that could not be evaluated."""
    index: int  # position in the scanned sequence
    pool_id: str
    error: str


@dataclass
class ScanReport:
    """Decisions and failures from one scan."""
    reference_price: float
    decisions: List[TradeDecision] = field(default_factory=list)
    failures: List[ScanFailure] = field(default_factory=list)
    duration: float = 0.0

    @property
    def trades(self) -> List[TradeDecision]:
        return [decision for decision in self.decisions if decision.is_trade]


class PoolScanner:
    """Runs the arbitrageur over many pools concurrently."""

    def __init__(
        self,
        arbitrageur: Optional[Arbitrageur] = None,
        max_workers: int = 4,
        snapshot_tolerance: Optional[float] = None
    ):
        """
        Initialize the scanner.

        Args:
            arbitrageur: Arbitrageur shared by all workers
            max_workers: Thread pool size
            snapshot_tolerance: If set, pools whose reported invariant is
                further than this from their reserves are rejected
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")

        self.arbitrageur = arbitrageur or Arbitrageur()
        self.max_workers = max_workers
        self.snapshot_tolerance = snapshot_tolerance

        self.stats = {
            "scans": 0,
            "pools_scanned": 0,
            "trades_found": 0,
            "pools_failed": 0,
        }

    @classmethod
    def from_settings(cls, settings: ArbitrageSettings) -> "PoolScanner":
        return cls(
            arbitrageur=Arbitrageur(ArbitrageConfig.from_settings(settings)),
            max_workers=settings.scanner_max_workers,
            snapshot_tolerance=settings.snapshot_tolerance
        )

    def scan(self, reference_price: float, pools: Sequence[RMMPool]) -> ScanReport:
        """
        Evaluate every pool against the reference price.

        Args:
            reference_price: Price of the risky asset in stable
            pools: Pool snapshots to evaluate

        Returns:
            Report with one decision per successfully evaluated pool, in
            input order, and one failure per pool that could not be evaluated
        """
        report = ScanReport(reference_price=reference_price)
        if not pools:
            return report

        start_time = time.time()
        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="rmm-scan") as executor:
            futures = [executor.submit(self._evaluate, reference_price, pool) for pool in pools]

            for index, (pool, future) in enumerate(zip(pools, futures)):
                try:
                    report.decisions.append(future.result())
                except RMMArbitrageError as e:
                    logger.error(f"Failed to evaluate pool {pool.pool_id}: {e}")
                    report.failures.append(ScanFailure(index=index, pool_id=pool.pool_id, error=str(e)))

        report.duration = time.time() - start_time

        self.stats["scans"] += 1
        self.stats["pools_scanned"] += len(pools)
        self.stats["trades_found"] += len(report.trades)
        self.stats["pools_failed"] += len(report.failures)

        logger.info(
            f"Scanned {len(pools)} pools in {report.duration:.4f}s - "
            f"trades: {len(report.trades)}, failures: {len(report.failures)}"
        )
        return report

    def _evaluate(self, reference_price: float, pool: RMMPool) -> TradeDecision:
        if self.snapshot_tolerance is not None:
            pool.validate_consistency(self.snapshot_tolerance)
        return self.arbitrageur.arbitrage(reference_price, pool)

    def get_stats(self) -> Dict[str, Any]:
        """Get scanner statistics."""
        return {
            **self.stats,
            "max_workers": self.max_workers,
        }
