"""Arbitrage sizing for RMM-01 covered-call replicating market makers."""

__version__ = "0.1.0"
