"""Unit tests for environment-driven settings."""
import pytest
from pydantic import ValidationError

from rmm_arbitrage.config.settings import ArbitrageSettings
from rmm_arbitrage.detection import PoolScanner
from rmm_arbitrage.optimization import ArbitrageConfig


def test_defaults(monkeypatch):
    """Defaults match the sizing constants."""
    monkeypatch.delenv("RMM_EPSILON", raising=False)
    monkeypatch.delenv("RMM_MATURITY_BUFFER_SECONDS", raising=False)
    settings = ArbitrageSettings(_env_file=None)

    assert settings.epsilon == 1e-4
    assert settings.optimal_threshold == 1e-8
    assert settings.maturity_buffer_seconds == 420
    assert settings.max_bisection_iterations == 200


def test_environment_override(monkeypatch):
    """RMM_ prefixed variables override the defaults."""
    monkeypatch.setenv("RMM_EPSILON", "0.001")
    monkeypatch.setenv("RMM_SCANNER_MAX_WORKERS", "8")
    settings = ArbitrageSettings(_env_file=None)

    assert settings.epsilon == 0.001
    assert settings.scanner_max_workers == 8


def test_field_names_accepted():
    """Settings can be built by field name as well as alias."""
    settings = ArbitrageSettings(_env_file=None, epsilon=0.01, optimal_threshold=0.5)

    assert settings.epsilon == 0.01
    assert settings.optimal_threshold == 0.5


def test_rejects_non_positive_epsilon():
    """Epsilon must be positive."""
    with pytest.raises(ValidationError):
        ArbitrageSettings(_env_file=None, epsilon=0)


def test_configs_from_settings():
    """Sizing and scanner configs are built from settings."""
    settings = ArbitrageSettings(
        _env_file=None, epsilon=0.002, max_bisection_iterations=50,
        scanner_max_workers=2, snapshot_tolerance=0.01
    )

    config = ArbitrageConfig.from_settings(settings)
    scanner = PoolScanner.from_settings(settings)

    assert config.epsilon == 0.002
    assert config.max_bisection_iterations == 50
    assert scanner.max_workers == 2
    assert scanner.snapshot_tolerance == 0.01
    assert scanner.arbitrageur.config.epsilon == 0.002
