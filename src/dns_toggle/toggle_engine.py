"""
Toggle Engine: sets a domain's proxied flag idempotently.

Before the first change to a domain the engine records the flag it found,
so restore() can return the record to its pre-automation setting no matter
how many enable, disable or monitor cycles ran since. A write is issued only
when the current flag differs from the desired one.
"""

from typing import Optional

from .audit_logger import AuditLogger
from .cloudflare_client import CloudflareClient
from .config import AppConfig
from .enums import LogLevel, ToggleOutcome
from .models import DomainRecord, ToggleResult
from .record_locator import RecordLocator
from .state_store import StateStore


class ToggleEngine:
    """Applies desired proxy settings and restores saved ones."""

    def __init__(
        self,
        config: AppConfig,
        client: CloudflareClient,
        state_store: StateStore,
        locator: Optional[RecordLocator] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the toggle engine.

        Args:
            config: Application configuration (static zone id is taken from here)
            client: Cloudflare API client used for the write
            state_store: Store of original proxy settings
            locator: Record locator (defaults to one over `client`)
            logger: Optional audit logger
        """
        self._config = config
        self._client = client
        self._state_store = state_store
        self._locator = locator or RecordLocator(client)
        self._logger = logger

    async def status(self, domain: str) -> DomainRecord:
        """
        Read the current DNS record of a domain.

        Raises:
            ZoneNotFoundError, RecordNotFoundError, ApiError
        """
        return await self._locate(domain)

    async def toggle(self, domain: str, desired_proxied: bool) -> ToggleResult:
        """
        Bring a domain's proxied flag to `desired_proxied`.

        Args:
            domain: Canonical domain name
            desired_proxied: True to route through Cloudflare, False for direct

        Returns:
            ToggleResult with outcome NOOP or TOGGLED

        Raises:
            ZoneNotFoundError: If no zone matches the domain
            RecordNotFoundError: If the zone has no record for the domain
            ApiError: If a lookup or the write fails (never retried)
            PersistenceError: If the original setting cannot be saved
        """
        self._log(LogLevel.INFO, f"Processing domain: {domain}", {"domain": domain})

        record = await self._locate(domain)

        if self._state_store.get(domain) is None:
            self._state_store.save(domain, record.record_id, record.proxied)
            self._log(
                LogLevel.DEBUG,
                f"Saved original state for {domain} (proxied={str(record.proxied).lower()})",
                {"domain": domain, "record_id": record.record_id},
            )

        if record.proxied == desired_proxied:
            self._log(
                LogLevel.INFO,
                f"Domain {domain} already in desired state (proxied={str(desired_proxied).lower()})",
                {"domain": domain},
            )
            return ToggleResult(
                domain=domain,
                outcome=ToggleOutcome.NOOP,
                previous_proxied=record.proxied,
                proxied=record.proxied,
                record=record,
            )

        self._log(
            LogLevel.INFO,
            f"Toggling proxy for {domain}: {str(record.proxied).lower()} -> {str(desired_proxied).lower()}",
            {"domain": domain, "zone_id": record.zone_id, "record_id": record.record_id},
        )
        await self._client.patch_record(record.zone_id, record.record_id, desired_proxied)

        return ToggleResult(
            domain=domain,
            outcome=ToggleOutcome.TOGGLED,
            previous_proxied=record.proxied,
            proxied=desired_proxied,
            record=DomainRecord(
                domain=record.domain,
                zone_id=record.zone_id,
                record_id=record.record_id,
                proxied=desired_proxied,
                record_type=record.record_type,
                content=record.content,
            ),
        )

    async def restore(self, domain: str) -> Optional[ToggleResult]:
        """
        Return a domain to the proxied flag saved before its first toggle.

        Returns:
            ToggleResult, or None if nothing was ever saved for the domain
        """
        saved = self._state_store.get(domain)
        if saved is None:
            self._log(LogLevel.WARN, f"No saved state for {domain}", {"domain": domain})
            return None

        return await self.toggle(domain, saved.original_proxied)

    async def _locate(self, domain: str) -> DomainRecord:
        zone_id = self._config.zone_id
        if zone_id is None:
            self._log(LogLevel.DEBUG, f"Auto-detecting zone for {domain}...", {"domain": domain})
        return await self._locator.locate(domain, zone_id)

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "ToggleEngine", message, data)

    @property
    def locator(self) -> RecordLocator:
        """Get the record locator instance."""
        return self._locator

    @property
    def state_store(self) -> StateStore:
        """Get the state store instance."""
        return self._state_store
