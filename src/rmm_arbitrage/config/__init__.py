"""Configuration for the RMM arbitrage core."""
