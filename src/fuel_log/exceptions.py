class FuelLogError(Exception):
    """Base exception for fuel log generation errors."""


class InvalidLogRequestError(FuelLogError):
    """Raised when the request parameters cannot produce a log."""
