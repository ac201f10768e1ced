"""
Enumeration types for the DNS proxy toggle system.

These enums provide type-safe constants for health categories, toggle
outcomes, error codes, and configuration options throughout the system.
"""

from enum import Enum


class HealthCategory(Enum):
    """Health of a domain as seen by a single probe."""

    UP = "up"
    CDN_DOWN = "cdn-down"
    ORIGIN_DOWN = "origin-down"
    UNREACHABLE = "unreachable"


class ToggleOutcome(Enum):
    """What a toggle call did to the DNS record."""

    NOOP = "noop"
    TOGGLED = "toggled"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class DomainValidationErrorCode(Enum):
    """Error codes for domain validation failures."""

    FORBIDDEN_CHARS = "forbidden_chars"
    MISSING_DOT = "missing_dot"
    INVALID_LABEL = "invalid_label"
    TOO_LONG = "too_long"
    IDNA_ERROR = "idna_error"
    EMPTY_INPUT = "empty_input"


class ExitCode(Enum):
    """Process exit codes of the command-line interface."""

    SUCCESS = 0
    USAGE = 1
    CONFIG_MISSING = 2
    API_FAILURE = 3
    NOT_FOUND = 4
