"""
DEX Protocol Math Implementations.

This package contains the closed-form curve math for replicating market
makers, isolated behind the CurveModel interface so the pool queries and
the arbitrage sizing never depend on a particular implementation.
"""
from .rmm_curve_math import CurveModel, PoolSide, RMMCurveMath

__all__ = [
    "CurveModel",
    "PoolSide",
    "RMMCurveMath"
]
