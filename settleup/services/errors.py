"""Custom exception classes for settlement recalculation.

Provides domain-specific exceptions for clear error handling and reporting.
"""


class SettlementError(Exception):
    """Base exception for settlement engine errors."""

    pass


class ConfigError(SettlementError, ValueError):
    """Configuration loading or validation error."""

    pass


class LedgerReadError(SettlementError):
    """Loading expenses or settlements for a scope failed."""

    pass


class LedgerWriteError(SettlementError):
    """Applying ledger mutations failed (session rolled back)."""

    pass
