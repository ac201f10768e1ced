"""
Cloudflare API v4 client.

This module provides the async API capability the toggle engine consumes:
zone lookup by name, DNS record listing, and the proxied-flag patch.

Every non-success response is raised as ApiError carrying the HTTP status
and the error messages Cloudflare embedded in the body. An empty result is
never an error here; callers decide what "not found" means.
"""

from typing import Any, Optional

import httpx

from .exceptions import ApiError


SELECTABLE_RECORD_TYPES = ("A", "AAAA", "CNAME")


class CloudflareClient:
    """
    Async Cloudflare API client with bearer authentication.

    In simulation mode reads still hit the API but patch_record returns the
    would-be record without sending the write.
    """

    def __init__(
        self,
        api_token: str,
        base_url: str = "https://api.cloudflare.com/client/v4",
        simulation_mode: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the Cloudflare client.

        Args:
            api_token: Bearer token with Zone:Read and DNS:Edit permissions
            base_url: API base URL
            simulation_mode: If True, no DNS record is ever modified
            transport: Optional httpx transport (used by tests)
        """
        self._api_token = api_token
        self._base_url = base_url.rstrip("/")
        self._simulation_mode = simulation_mode
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "CloudflareClient":
        """Async context manager entry."""
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    @property
    def simulation_mode(self) -> bool:
        return self._simulation_mode

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                verify=True,
                headers={
                    "Authorization": f"Bearer {self._api_token}",
                    "Content-Type": "application/json",
                },
                transport=self._transport,
            )
        return self._client

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        json_body: Optional[dict] = None,
    ) -> Any:
        """
        Send one API request and return the envelope's result field.

        Raises:
            ApiError: On transport failure, non-2xx status, or success=false
        """
        client = self._ensure_client()

        try:
            response = await client.request(
                method, endpoint, params=params, json=json_body
            )
        except httpx.HTTPError as e:
            raise ApiError(
                status_code=0,
                message=f"{type(e).__name__}: {e}",
                details={"method": method, "endpoint": endpoint},
            )

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not response.is_success or not isinstance(payload, dict) or not payload.get("success", False):
            raise ApiError(
                status_code=response.status_code,
                message=self._error_message(payload),
                details={
                    "method": method,
                    "endpoint": endpoint,
                    "errors": payload.get("errors", []) if isinstance(payload, dict) else [],
                },
            )

        return payload.get("result")

    @staticmethod
    def _error_message(payload: Any) -> str:
        if isinstance(payload, dict):
            messages = [
                str(error.get("message"))
                for error in payload.get("errors") or []
                if isinstance(error, dict) and error.get("message")
            ]
            if messages:
                return "; ".join(messages)
        return "Unknown error"

    async def list_zones_by_name(self, name: str) -> list[dict]:
        """Zones whose name is exactly `name` (zero or one expected)."""
        result = await self._request("GET", "/zones", params={"name": name})
        return list(result or [])

    async def list_records(
        self,
        zone_id: str,
        name: Optional[str] = None,
        types: Optional[tuple[str, ...]] = None,
    ) -> list[dict]:
        """
        List DNS records in a zone.

        Args:
            zone_id: Zone identifier
            name: Exact record name filter
            types: Record type filter, e.g. ("A", "AAAA", "CNAME")

        Returns:
            Raw record dictionaries as returned by the API
        """
        params = {}
        if name is not None:
            params["name"] = name
        if types:
            params["type"] = ",".join(types)
        result = await self._request(
            "GET", f"/zones/{zone_id}/dns_records", params=params or None
        )
        return list(result or [])

    async def patch_record(self, zone_id: str, record_id: str, proxied: bool) -> dict:
        """
        Set the proxied flag of a DNS record.

        Returns:
            The updated record as returned by the API
        """
        if self._simulation_mode:
            return {"id": record_id, "zone_id": zone_id, "proxied": proxied}

        result = await self._request(
            "PATCH",
            f"/zones/{zone_id}/dns_records/{record_id}",
            json_body={"proxied": proxied},
        )
        return result or {}

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
