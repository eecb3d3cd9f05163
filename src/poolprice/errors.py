"""Exceptions raised at configuration and input boundaries. The engine itself never raises."""

from __future__ import annotations


class PoolPriceError(Exception):
    """Base class for poolprice errors."""


class ConfigError(PoolPriceError):
    """Invalid configuration value."""


class FixtureError(PoolPriceError):
    """Offline fixture file missing or unreadable."""
