"""Exceptions raised by the scheduling and invoicing core."""

from typing import Any


class InvoicingError(Exception):
    """Base exception for contractor invoicing errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidArgumentError(InvoicingError, ValueError):
    """A caller supplied an argument the core cannot work with."""

    pass


class PeriodNotFoundError(InvalidArgumentError):
    """The requested period number is not part of the schedule."""

    pass


class DuplicateInvoiceError(InvoicingError):
    """An invoice already exists for the contractor and period."""

    pass
