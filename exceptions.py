"""
Custom exception classes for the Symb0l API.

Errors raised here are startup-time failures: a bad version configuration
or a route set that cannot serve every version it is mounted for. Routine
lifecycle outcomes (unknown version, sunsetted version) are plain HTTP
responses and never raise.
"""

from typing import Optional, Dict, Any


class SymbolApiError(Exception):
    """
    Base exception class for all Symb0l API errors.

    Provides common functionality for error codes, user messages,
    and additional context information.
    """

    def __init__(self, message: str, code: str = None, details: Dict[str, Any] = None, user_message: str = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}
        self.user_message = user_message or message

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            'error': self.user_message,
            'code': self.code,
            'details': self.details
        }


class ConfigurationError(SymbolApiError):
    """Raised when the version configuration violates an invariant.

    Fatal: the process must not start serving traffic.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="INVALID_CONFIGURATION",
            details=details,
            user_message="The API version configuration is invalid."
        )


class UnmappedVersionError(ConfigurationError):
    """Raised when a route set has no response variant for a mounted version."""

    def __init__(self, table: str, version: str, missing: Optional[list] = None):
        super().__init__(
            message=f"No '{table}' variant registered for API version {version}",
            details={'table': table, 'version': version, 'missing': missing or [version]}
        )
        self.table = table
        self.version = version
