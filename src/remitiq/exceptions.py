"""Custom exceptions for the RemitIQ rate intelligence service.

The analytical core degrades to neutral values instead of raising, so the
hierarchy is small: one core error plus the collaborator failures the
service layer needs to tell apart.
"""


class RemitIQError(Exception):
    """Base exception for all RemitIQ errors."""


class InsufficientDataError(RemitIQError):
    """Raised when a computation receives an empty rate series."""


class RateSourceError(RemitIQError):
    """Raised when a rate source cannot produce a usable series or rate."""


class UnknownProviderError(RemitIQError):
    """Raised when a provider id is not in the provider table."""


class StoreUnavailableError(RemitIQError):
    """Raised when an operation needs the rate store but it is disabled."""
