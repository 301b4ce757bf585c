"""
Bisection root finding.

Interval bisection over a scalar function whose endpoints bracket a sign
change. Convergence is linear: each iteration halves the bracket, so the
iteration count is bounded by log2(width / tolerance).
"""
import logging
from typing import Callable, Optional

from ..protocols.exceptions import BracketingError, ConvergenceError

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 1e-4


def _sign(value: float) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def has_sign_change(fa: float, fb: float) -> bool:
    """Whether two function values have strictly opposite signs."""
    return _sign(fa) * _sign(fb) < 0


def bisection(func: Callable[[float], float], a: float, b: float,
              tolerance: float = DEFAULT_TOLERANCE,
              max_iterations: Optional[int] = None) -> float:
    """
    Find a root of `func` in [a, b].

    Args:
        func: Continuous function to find the zero of
        a: Left endpoint
        b: Right endpoint
        tolerance: Stop once the bracket is narrower than this
        max_iterations: Optional cap on the number of halvings

    Returns:
        Midpoint of the final bracket, or an endpoint/midpoint where func is
        exactly zero

    Raises:
        BracketingError: If func(a) and func(b) do not have opposite signs
        ConvergenceError: If max_iterations is reached first
    """
    if not tolerance > 0:
        raise ValueError(f"Tolerance must be positive, got {tolerance}")
    if not a < b:
        raise ValueError(f"Left endpoint must be below right endpoint: [{a}, {b}]")

    fa = func(a)
    fb = func(b)
    if fa == 0:
        return a
    if fb == 0:
        return b
    if not has_sign_change(fa, fb):
        raise BracketingError(a, b, fa, fb)

    iterations = 0
    mid = a
    while b - a >= tolerance:
        if max_iterations is not None and iterations >= max_iterations:
            raise ConvergenceError(iterations, b - a)

        mid = (a + b) / 2
        fmid = func(mid)
        iterations += 1

        if fmid == 0:
            break
        if has_sign_change(fa, fmid):
            b = mid
        else:
            a, fa = mid, fmid

    logger.debug(f"Bisection converged to {mid} after {iterations} iterations")
    return mid


def solve_or_boundary(func: Callable[[float], float], lower: float, upper: float,
                      tolerance: float = DEFAULT_TOLERANCE,
                      max_iterations: Optional[int] = None) -> float:
    """
    Root of `func` in [lower, upper], or `upper` if there is no sign change.

    For a monotonic func, equal signs at both ends mean the root lies beyond
    `upper`, so the whole interval is the best available answer.
    """
    f_lower = func(lower)
    f_upper = func(upper)
    if _sign(f_lower) == _sign(f_upper):
        logger.debug(
            f"No sign change on [{lower}, {upper}] "
            f"(f={f_lower}, {f_upper}), using upper bound"
        )
        return upper

    return bisection(func, lower, upper, tolerance=tolerance, max_iterations=max_iterations)
