"""
Exception classes for the DNS proxy toggle system.

All exceptions inherit from DnsToggleError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional

from .enums import ExitCode


class DnsToggleError(Exception):
    """Base exception for all DNS proxy toggle errors."""

    exit_code = ExitCode.USAGE

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigMissingError(DnsToggleError):
    """Raised when required configuration is missing or malformed."""

    exit_code = ExitCode.CONFIG_MISSING


class DependencyMissingError(DnsToggleError):
    """Raised when a required system tool is not installed."""

    exit_code = ExitCode.CONFIG_MISSING


class ValidationError(DnsToggleError):
    """Raised when domain validation fails."""

    exit_code = ExitCode.NOT_FOUND


class ZoneNotFoundError(DnsToggleError):
    """Raised when no Cloudflare zone matches a domain or its base domain."""

    exit_code = ExitCode.NOT_FOUND

    def __init__(self, domain: str, candidates: Optional[list[str]] = None) -> None:
        super().__init__(
            code="zone_not_found",
            message=f"Could not find zone for {domain}",
            details={"domain": domain, "candidates": candidates or [domain]},
        )
        self.domain = domain


class RecordNotFoundError(DnsToggleError):
    """Raised when a zone has no DNS record with the requested name."""

    exit_code = ExitCode.NOT_FOUND

    def __init__(self, zone_id: str, domain: str) -> None:
        super().__init__(
            code="record_not_found",
            message=f"Domain not found: {domain}",
            details={"domain": domain, "zone_id": zone_id},
        )
        self.domain = domain
        self.zone_id = zone_id


class ApiError(DnsToggleError):
    """
    Raised when a Cloudflare API call fails.

    status_code is the HTTP status of the response, or 0 when no response
    was received at all.
    """

    exit_code = ExitCode.API_FAILURE

    def __init__(
        self,
        status_code: int,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        super().__init__(code="api_error", message=message, details=details)
        self.status_code = status_code

    def __str__(self) -> str:
        return f"API call failed: HTTP {self.status_code}: {self.message}"

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["status_code"] = self.status_code
        return data


class PersistenceError(DnsToggleError):
    """Raised when persistence operations fail (file I/O, malformed state)."""

    exit_code = ExitCode.USAGE
