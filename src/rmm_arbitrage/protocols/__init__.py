"""RMM pool state, curve math and pool identifiers."""
from .contracts import compute_engine_address, compute_pool_id, get_create2_address
from .dex_protocols import CurveModel, PoolSide, RMMCurveMath
from .exceptions import (
    BracketingError,
    ConvergenceError,
    CurveDomainError,
    DomainViolationError,
    InconsistentSnapshotError,
    InvalidAmountError,
    InvalidPoolError,
    InvalidTokenError,
    NegativeOutputError,
    NegativeReserveError,
    PoolExpiredError,
    RMMArbitrageError,
    RootFindingError,
)
from .pool_snapshot import PoolSnapshot
from .rmm_pool import RMMPool, SwapResult

__all__ = [
    "BracketingError",
    "ConvergenceError",
    "CurveDomainError",
    "CurveModel",
    "DomainViolationError",
    "InconsistentSnapshotError",
    "InvalidAmountError",
    "InvalidPoolError",
    "InvalidTokenError",
    "NegativeOutputError",
    "NegativeReserveError",
    "PoolExpiredError",
    "PoolSide",
    "PoolSnapshot",
    "RMMArbitrageError",
    "RMMCurveMath",
    "RMMPool",
    "RootFindingError",
    "SwapResult",
    "compute_engine_address",
    "compute_pool_id",
    "get_create2_address",
]
