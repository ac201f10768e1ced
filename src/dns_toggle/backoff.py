"""
Backoff policy for the monitor loop.

While the Cloudflare API keeps failing, every round would otherwise re-query
every domain at the normal interval. The policy adds an exponentially growing
delay after each consecutive failed round and resets on the first round that
gets through.
"""

from .config import BackoffConfig


class BackoffPolicy:
    """Tracks consecutive failed rounds and computes the extra delay."""

    def __init__(self, config: BackoffConfig) -> None:
        """
        Initialize the backoff policy.

        Args:
            config: Base and maximum extra delay in seconds
        """
        self._config = config
        self._consecutive_failures = 0

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    def _calculate_delay(self, failures: int) -> float:
        """
        Extra wait after `failures` consecutive failed rounds.

        delay(n) = base * 2^(n-1), capped at max; zero when n is zero.
        """
        if failures <= 0:
            return 0.0
        delay = self._config.base_delay_seconds * (2 ** (failures - 1))
        return min(delay, self._config.max_delay_seconds)

    def record_round(self, api_failure: bool) -> float:
        """
        Record the outcome of a round.

        Args:
            api_failure: True if every API call of the round failed

        Returns:
            Extra delay in seconds to add to the regular interval
        """
        if api_failure:
            self._consecutive_failures += 1
        else:
            self._consecutive_failures = 0
        return self._calculate_delay(self._consecutive_failures)

    def reset(self) -> None:
        self._consecutive_failures = 0
