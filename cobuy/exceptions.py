from __future__ import annotations


class CobuyError(Exception):
    """Base class for errors raised by the recommendation engine."""


class ConfigurationError(CobuyError, ValueError):
    """Raised when engine settings are out of range."""


class MiningError(CobuyError, RuntimeError):
    """Raised when a mining pass fails. The previous rule set stays in place."""
