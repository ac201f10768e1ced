"""
Data models for the DNS proxy toggle system.

This module defines the data structures used for DNS record identification,
probe outcomes, toggle results, persisted state, and monitor reports.
"""

from dataclasses import dataclass, field
from typing import Optional

from .enums import HealthCategory, ToggleOutcome


@dataclass(frozen=True)
class DomainRecord:
    """One DNS record under management."""

    domain: str
    zone_id: str
    record_id: str
    proxied: bool
    record_type: Optional[str] = None
    content: Optional[str] = None


@dataclass(frozen=True)
class SavedState:
    """The routing mode observed the first time a domain was toggled."""

    domain: str
    record_id: str
    original_proxied: bool
    timestamp: int  # epoch seconds


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a single health probe against a domain."""

    domain: str
    category: HealthCategory
    status_code: Optional[int]  # None when no response was received
    cdn_signal: bool = False
    cdn_branded: bool = False
    error: Optional[str] = None
    response_time_ms: float = 0.0


@dataclass(frozen=True)
class ToggleResult:
    """Result of a toggle call."""

    domain: str
    outcome: ToggleOutcome
    previous_proxied: bool
    proxied: bool
    record: DomainRecord

    @property
    def changed(self) -> bool:
        return self.outcome == ToggleOutcome.TOGGLED


@dataclass
class DomainReport:
    """What the monitor did for one domain in one round."""

    domain: str
    probe: ProbeResult
    toggle: Optional[ToggleResult] = None
    error: Optional[str] = None
    api_attempted: bool = False
    api_failed: bool = False


@dataclass
class RoundReport:
    """All domain reports of a single monitor round."""

    round_number: int
    started_at: str
    reports: list[DomainReport] = field(default_factory=list)

    @property
    def api_failure(self) -> bool:
        """True if the round attempted API calls and every one of them failed."""
        attempted = [r for r in self.reports if r.api_attempted]
        return bool(attempted) and all(r.api_failed for r in attempted)
