"""
HTTP health probe for proxied domains.

Sends a single HTTPS request to a domain and turns the response (or the
lack of one) into a ProbeResult. Probing never raises: every transport
failure becomes an UNREACHABLE result so one bad domain cannot abort the
processing of the others.
"""

import time
from typing import Optional

import httpx

from . import __version__
from .classifier import HealthClassifier
from .models import ProbeResult


USER_AGENT = f"cloudflare-dns-toggle/{__version__}"

# Header Cloudflare adds to every response that passed through its edge
CDN_SIGNAL_HEADER = "cf-ray"
CDN_BRAND_MARKER = "cloudflare"


class HealthProbe:
    """
    Async HTTP health probe.

    The probe does not follow redirects: a 301 from the origin is already
    proof that edge and origin both answer.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        classifier: Optional[HealthClassifier] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the health probe.

        Args:
            timeout: Request timeout in seconds
            classifier: Classifier used to categorize outcomes
            transport: Optional httpx transport (used by tests)
        """
        self._timeout = timeout
        self._classifier = classifier or HealthClassifier()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "HealthProbe":
        """Async context manager entry."""
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                verify=True,
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=False,
                headers={"User-Agent": USER_AGENT},
                transport=self._transport,
            )
        return self._client

    async def probe(self, domain: str) -> ProbeResult:
        """
        Probe https://<domain> once.

        Args:
            domain: Canonical domain name

        Returns:
            ProbeResult with the classified health category
        """
        start_time = time.perf_counter()
        client = self._ensure_client()

        try:
            response = await client.get(f"https://{domain}")
        except httpx.TimeoutException:
            return self._unreachable(
                domain, f"Request timed out after {self._timeout}s", start_time
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return self._unreachable(domain, f"{type(e).__name__}: {e}", start_time)

        cdn_signal = CDN_SIGNAL_HEADER in response.headers
        cdn_branded = CDN_BRAND_MARKER in response.text.lower()
        category = self._classifier.classify(
            response.status_code, cdn_signal, cdn_branded
        )

        return ProbeResult(
            domain=domain,
            category=category,
            status_code=response.status_code,
            cdn_signal=cdn_signal,
            cdn_branded=cdn_branded,
            response_time_ms=self._elapsed_ms(start_time),
        )

    def _unreachable(self, domain: str, error: str, start_time: float) -> ProbeResult:
        return ProbeResult(
            domain=domain,
            category=self._classifier.classify(None),
            status_code=None,
            error=error,
            response_time_ms=self._elapsed_ms(start_time),
        )

    def _elapsed_ms(self, start_time: float) -> float:
        """Calculate elapsed time in milliseconds."""
        return (time.perf_counter() - start_time) * 1000

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
