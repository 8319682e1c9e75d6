"""Custom exceptions for cafe-checkin."""


class CafeCheckinError(Exception):
    """Base exception for cafe-checkin."""

    pass


class ValidationError(CafeCheckinError):
    """Raised when a referenced café, bean or order field cannot be resolved."""

    pass


class RemoteError(CafeCheckinError):
    """Raised when the remote store rejects a call."""

    pass


class ParseError(CafeCheckinError):
    """Raised when a scanned payload does not yield a café id."""

    pass


class FlowError(CafeCheckinError):
    """Raised when the ordering flow is driven out of sequence."""

    pass


class ConfigurationError(CafeCheckinError):
    """Raised when required settings are missing."""

    pass
