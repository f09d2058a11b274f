"""Custom exception hierarchy for VibeCheck.

Input problems are raised to the caller. Collaborator failures (reference
data lookups, the npm audit) are absorbed and encoded as data, so most of
these classes only appear inside the package.
"""


class VibeCheckError(Exception):
    """Base exception for all VibeCheck errors.

    All custom exceptions should inherit from this class to allow
    callers to catch all VibeCheck-specific errors with a single
    except clause when appropriate.
    """
    pass


# =============================================================================
# Validation Errors
# =============================================================================

class ValidationError(VibeCheckError):
    """Base exception for input validation errors."""
    pass


class InvalidInputError(ValidationError):
    """Invalid or missing input provided to a tool (no path/files, empty scan, bad path)."""
    pass


# =============================================================================
# Scanner Errors
# =============================================================================

class ScannerError(VibeCheckError):
    """Base exception for scanner-related errors."""
    pass


class AuditError(ScannerError):
    """The package-manager audit could not produce a usable report."""
    pass


# =============================================================================
# Client Errors (API/Network)
# =============================================================================

class ClientError(VibeCheckError):
    """Base exception for reference-data client errors."""
    pass


class NetworkError(ClientError):
    """Network connectivity or request error."""
    pass


class APIError(ClientError):
    """Error returned by an external API."""

    def __init__(self, message: str, status_code: int | None = None, response_body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body
