from __future__ import annotations


class QuoteError(Exception):
    """Base class for every failure raised by the quote engine."""


class InvalidInput(QuoteError, ValueError):
    """The monthly bill amount is missing, non-numeric, zero or negative."""


class DegenerateProjection(QuoteError, ArithmeticError):
    """Sizing and tariff produce no positive annual savings, so payback is undefined."""


class TariffConfigurationError(QuoteError, ValueError):
    """The tariff table or a market constant is inconsistent; raised at startup."""
