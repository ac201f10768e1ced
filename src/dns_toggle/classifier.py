"""
Health classifier for probe outcomes.

Maps a single probe outcome to a HealthCategory. The decision tells apart
failures of Cloudflare's edge network, which bypassing the proxy can fix,
from failures of the origin server, which it cannot.

Classification is a pure function of the status code and the two CDN
signal flags.
"""

from typing import Optional

from .enums import HealthCategory


# Codes Cloudflare returns when the edge reached the origin and the origin
# (or the TLS session to it) failed.
ORIGIN_ERROR_CODES = frozenset(range(520, 528))

# Server errors that may come from either the edge or the origin.
AMBIGUOUS_ERROR_CODES = frozenset({500, 502, 503})

ORIGIN_ERROR_DESCRIPTIONS = {
    520: "Origin returned empty response",
    521: "Origin refused connection",
    522: "Origin connection timeout",
    523: "Origin unreachable",
    524: "Origin timeout",
    525: "SSL handshake failed",
    526: "Invalid SSL certificate",
    527: "Railgun error",
}

CLIENT_ERROR_DESCRIPTIONS = {
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
}


class HealthClassifier:
    """
    Classifies probe outcomes into health categories.

    Rules are evaluated in order:
    1. 520-527 is an origin failure regardless of any signal
    2. 500/502/503 through the edge is a CDN failure only when the body is
       Cloudflare-branded, otherwise the origin error merely passed through
    3. No response at all is unreachable
    4. Any other response, 2xx or not, means edge and origin both answer
    """

    def classify(
        self,
        status_code: Optional[int],
        cdn_signal: bool = False,
        cdn_branded: bool = False,
    ) -> HealthCategory:
        """
        Classify a probe outcome.

        Args:
            status_code: HTTP status code, or None when no response arrived
            cdn_signal: The response carried a CF-RAY header
            cdn_branded: The response body is a Cloudflare-branded error page

        Returns:
            The HealthCategory of the outcome
        """
        if status_code in ORIGIN_ERROR_CODES:
            return HealthCategory.ORIGIN_DOWN

        if status_code in AMBIGUOUS_ERROR_CODES and cdn_signal:
            if cdn_branded:
                return HealthCategory.CDN_DOWN
            return HealthCategory.ORIGIN_DOWN

        if status_code is None:
            return HealthCategory.UNREACHABLE

        if 200 <= status_code <= 299:
            return HealthCategory.UP

        # 4xx and friends: a content problem, not a routing problem
        return HealthCategory.UP

    def describe(self, category: HealthCategory, status_code: Optional[int]) -> str:
        """Human-readable description of a classified outcome."""
        if category == HealthCategory.UNREACHABLE:
            return "Unreachable (connection failed)"

        if category == HealthCategory.CDN_DOWN:
            return f"Cloudflare network error (HTTP {status_code})"

        if category == HealthCategory.ORIGIN_DOWN:
            text = ORIGIN_ERROR_DESCRIPTIONS.get(status_code, "Origin server error")
            return f"{text} (HTTP {status_code})"

        if status_code == 200:
            return f"OK (HTTP {status_code})"
        if status_code in CLIENT_ERROR_DESCRIPTIONS:
            return f"{CLIENT_ERROR_DESCRIPTIONS[status_code]} (HTTP {status_code})"
        return f"Responding (HTTP {status_code})"
