"""Exceptions raised by the RMM pool math and the arbitrage sizing core."""
from typing import Optional


class RMMArbitrageError(Exception):
    """Base exception for RMM pool and arbitrage errors."""

    def __init__(self, message: str, pool_id: Optional[str] = None):
        """
        Initialize the error.

        Args:
            message: Error message
            pool_id: Identifier of the pool the error relates to, if known
        """
        self.pool_id = pool_id
        super().__init__(message)

    def __str__(self) -> str:
        """String representation of the error."""
        base_msg = super().__str__()
        if self.pool_id:
            return f"[{self.pool_id[:10]}] {base_msg}"
        return base_msg


class InvalidAmountError(RMMArbitrageError, ValueError):
    """Raised for a negative trade size or a non-positive reference price."""


class InvalidTokenError(RMMArbitrageError, ValueError):
    """Raised when a token is neither the risky nor the stable asset of a pool."""


class InvalidPoolError(RMMArbitrageError, ValueError):
    """Raised when a pool snapshot violates its construction invariants."""


class DomainViolationError(RMMArbitrageError):
    """A curve query was evaluated outside the curve's valid domain."""


class CurveDomainError(DomainViolationError):
    """Raised by the curve model for out-of-domain reserves or parameters."""


class NegativeReserveError(DomainViolationError):
    """The curve-implied reserve after a trade is negative."""

    def __init__(self, reserve: float, pool_id: Optional[str] = None):
        self.reserve = reserve
        super().__init__(f"Reserves cannot be negative: {reserve}", pool_id=pool_id)


class NegativeOutputError(DomainViolationError):
    """The computed output amount of a trade is negative."""

    def __init__(self, amount_out: float, pool_id: Optional[str] = None):
        self.amount_out = amount_out
        super().__init__(f"Amount out cannot be negative: {amount_out}", pool_id=pool_id)


class PoolExpiredError(DomainViolationError):
    """The pool has reached maturity and its curve is degenerate."""


class InconsistentSnapshotError(RMMArbitrageError):
    """The reported invariant disagrees with the invariant implied by the reserves."""

    def __init__(
        self,
        reported: float,
        computed: float,
        tolerance: float,
        pool_id: Optional[str] = None
    ):
        self.reported = reported
        self.computed = computed
        self.tolerance = tolerance
        super().__init__(
            f"Reported invariant {reported} differs from computed {computed} "
            f"by more than {tolerance}",
            pool_id=pool_id
        )


class RootFindingError(RMMArbitrageError):
    """Base exception for root finder failures."""


class BracketingError(RootFindingError):
    """The endpoints of a bisection do not bracket a sign change."""

    def __init__(self, a: float, b: float, fa: float, fb: float):
        self.a = a
        self.b = b
        self.fa = fa
        self.fb = fb
        super().__init__(f"f({a})={fa} and f({b})={fb} do not bracket a root")


class ConvergenceError(RootFindingError):
    """Bisection ran out of iterations before the bracket became narrow enough."""

    def __init__(self, iterations: int, width: float):
        self.iterations = iterations
        self.width = width
        super().__init__(
            f"Bisection failed to converge after {iterations} iterations "
            f"(bracket width {width})"
        )
