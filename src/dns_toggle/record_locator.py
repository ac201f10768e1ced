"""
Record Locator: resolves a domain name to its Cloudflare zone and DNS record.

Zone resolution tries the exact name first and then the two rightmost
labels. This base-domain heuristic does not consult the public suffix list,
so subdomains under multi-label suffixes such as .co.uk are not resolved
correctly unless CF_ZONE_ID is set.
"""

from typing import Optional

from .cloudflare_client import SELECTABLE_RECORD_TYPES, CloudflareClient
from .exceptions import RecordNotFoundError, ZoneNotFoundError
from .models import DomainRecord


def base_domain(domain: str) -> str:
    """Return the two rightmost labels of a domain name."""
    labels = domain.rstrip(".").split(".")
    return ".".join(labels[-2:])


def record_from_api(zone_id: str, raw: dict) -> DomainRecord:
    """Build a DomainRecord from an API record dictionary."""
    return DomainRecord(
        domain=raw.get("name", ""),
        zone_id=raw.get("zone_id") or zone_id,
        record_id=raw["id"],
        proxied=bool(raw.get("proxied", False)),
        record_type=raw.get("type"),
        content=raw.get("content"),
    )


class RecordLocator:
    """Read-only lookups of zones and records through the Cloudflare client."""

    def __init__(self, client: CloudflareClient) -> None:
        self._client = client

    async def resolve_zone(self, domain: str) -> str:
        """
        Find the zone id for a domain.

        Args:
            domain: Canonical domain name

        Returns:
            Zone identifier

        Raises:
            ZoneNotFoundError: If neither the name nor its base domain is a zone
            ApiError: If a lookup fails
        """
        candidates = [domain]
        base = base_domain(domain)
        if base != domain:
            candidates.append(base)

        for candidate in candidates:
            zones = await self._client.list_zones_by_name(candidate)
            if zones and zones[0].get("id"):
                return zones[0]["id"]

        raise ZoneNotFoundError(domain, candidates)

    async def resolve_record(self, zone_id: str, domain: str) -> DomainRecord:
        """
        Find the DNS record named exactly `domain` in a zone.

        Raises:
            RecordNotFoundError: If the zone has no record with that name
            ApiError: If the lookup fails
        """
        records = await self._client.list_records(zone_id, name=domain)
        if not records:
            raise RecordNotFoundError(zone_id, domain)

        record = record_from_api(zone_id, records[0])
        if not record.domain:
            record = DomainRecord(
                domain=domain,
                zone_id=record.zone_id,
                record_id=record.record_id,
                proxied=record.proxied,
                record_type=record.record_type,
                content=record.content,
            )
        return record

    async def locate(self, domain: str, zone_id: Optional[str] = None) -> DomainRecord:
        """Resolve the zone (unless given) and then the record for a domain."""
        if zone_id is None:
            zone_id = await self.resolve_zone(domain)
        return await self.resolve_record(zone_id, domain)

    async def list_zone_records(self, zone_id: str) -> list[DomainRecord]:
        """All A, AAAA and CNAME records of a zone."""
        records = await self._client.list_records(zone_id, types=SELECTABLE_RECORD_TYPES)
        return [record_from_api(zone_id, raw) for raw in records]
