"""Exceptions for CloseBy Towing pricing"""


class PricingError(Exception):
    """Base class for pricing errors."""


class ConfigUnavailableError(PricingError):
    """Raised when the pricing configuration cannot be fetched."""

    def __init__(self, message: str, cause: Exception = None):
        self.cause = cause
        super().__init__(message)
