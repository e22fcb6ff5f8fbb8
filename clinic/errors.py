"""Exception classes for the clinic records service.

All exceptions inherit from ClinicError so callers can catch every
record-management failure in one place.
"""


class ClinicError(Exception):
    """Base exception for all clinic records errors."""

    status_code: int = 500


class ValidationError(ClinicError):
    """Raised when a required field is missing or malformed.

    Examples:
        - Empty patient name or phone
        - Visit without a disease or a date
        - Date that is not in YYYY-MM-DD format
    """

    status_code = 400


class NotFoundError(ClinicError):
    """Raised when a patient or visit id does not match a stored record."""

    status_code = 404


class ConflictError(ClinicError):
    """Raised when a patient with the same phone number already exists."""

    status_code = 409


class StoreUnavailableError(ClinicError):
    """Raised when the backing record store cannot be reached or read.

    Examples:
        - Database server not reachable
        - Local data file unreadable or corrupted
    """

    status_code = 503


class ConfigurationError(ClinicError):
    """Raised when settings cannot produce a working record store."""
