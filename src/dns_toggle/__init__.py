"""
Cloudflare DNS Toggle - keep proxied domains reachable through edge outages.

This package watches domains fronted by Cloudflare, tells edge failures apart
from origin failures, and flips the DNS record's proxied flag to bypass the
edge while it is down, remembering the original setting for restore.
"""

__version__ = "0.1.0"
__author__ = "Cloudflare DNS Toggle Team"

from dns_toggle.exceptions import (
    DnsToggleError,
    ConfigMissingError,
    DependencyMissingError,
    ValidationError,
    ZoneNotFoundError,
    RecordNotFoundError,
    ApiError,
    PersistenceError,
)
from dns_toggle.enums import (
    HealthCategory,
    ToggleOutcome,
    LogLevel,
    DomainValidationErrorCode,
    ExitCode,
)
from dns_toggle.config import (
    BackoffConfig,
    LoggingConfig,
    AppConfig,
    load_config,
)
from dns_toggle.models import (
    DomainRecord,
    SavedState,
    ProbeResult,
    ToggleResult,
    DomainReport,
    RoundReport,
)
from dns_toggle.classifier import HealthClassifier
from dns_toggle.health_probe import HealthProbe
from dns_toggle.cloudflare_client import CloudflareClient
from dns_toggle.record_locator import RecordLocator, base_domain
from dns_toggle.state_store import StateStore
from dns_toggle.toggle_engine import ToggleEngine
from dns_toggle.backoff import BackoffPolicy
from dns_toggle.monitor import Monitor
from dns_toggle.domain_validator import (
    DomainValidator,
    DomainValidationResult,
    DomainValidationError,
)
from dns_toggle.audit_logger import AuditLogger, LogEntry, create_logger
from dns_toggle.service import render_unit, install_service
from dns_toggle.cli import main as cli_main, create_parser

__all__ = [
    # Exceptions
    "DnsToggleError",
    "ConfigMissingError",
    "DependencyMissingError",
    "ValidationError",
    "ZoneNotFoundError",
    "RecordNotFoundError",
    "ApiError",
    "PersistenceError",
    # Enums
    "HealthCategory",
    "ToggleOutcome",
    "LogLevel",
    "DomainValidationErrorCode",
    "ExitCode",
    # Configuration
    "BackoffConfig",
    "LoggingConfig",
    "AppConfig",
    "load_config",
    # Models
    "DomainRecord",
    "SavedState",
    "ProbeResult",
    "ToggleResult",
    "DomainReport",
    "RoundReport",
    # Core
    "HealthClassifier",
    "HealthProbe",
    "CloudflareClient",
    "RecordLocator",
    "base_domain",
    "StateStore",
    "ToggleEngine",
    "BackoffPolicy",
    "Monitor",
    # Domain Validator
    "DomainValidator",
    "DomainValidationResult",
    "DomainValidationError",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    "create_logger",
    # Service
    "render_unit",
    "install_service",
    # CLI
    "cli_main",
    "create_parser",
]
