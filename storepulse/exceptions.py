"""Custom exception hierarchy for storepulse."""


class StorePulseError(Exception):
    """Base exception for storepulse."""
    pass


class CollaboratorUnavailableError(StorePulseError):
    """Raised when an extension, tool or service a probe needs is not present."""
    pass


class MeasurementFailedError(StorePulseError):
    """Raised when a timed operation itself errored (e.g. HTTP 503)."""
    pass


class InvalidInputError(StorePulseError, ValueError):
    """Raised for programming errors by the caller, such as zero iterations.

    Never downgraded to a Check.
    """
    pass
