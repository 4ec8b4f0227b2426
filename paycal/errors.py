from __future__ import annotations


class PaycalError(Exception):
    """Base class for schedule and period resolution failures."""


class ValidationError(PaycalError):
    """Raised when structural input (year, month, week number, cadence) is out of range."""


class CalculationError(PaycalError):
    """Raised when a date value cannot be parsed or computed."""


class AggregateError(PaycalError):
    """Raised when a whole resolution pipeline cannot produce a result."""
