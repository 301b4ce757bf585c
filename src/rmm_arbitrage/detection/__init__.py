"""Batch evaluation of pools against a reference price."""
from .pool_scanner import PoolScanner, ScanFailure, ScanReport

__all__ = ["PoolScanner", "ScanFailure", "ScanReport"]
