"""
Monitor loop for continuous proxy management.

Each round probes every configured domain in order, classifies the result,
and, when auto-toggle is enabled, bypasses Cloudflare on edge failures and
re-enables the proxy once the domain is healthy again. Domains are handled
strictly one after another with a short pause in between, which keeps the
request rate to the Cloudflare API low.

A failure on one domain is logged and the loop moves on; the loop itself
only ends on external cancellation.
"""

import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from .audit_logger import AuditLogger
from .backoff import BackoffPolicy
from .classifier import HealthClassifier
from .config import AppConfig
from .enums import HealthCategory, LogLevel
from .exceptions import ApiError, DnsToggleError
from .health_probe import HealthProbe
from .models import DomainReport, RoundReport
from .toggle_engine import ToggleEngine


class Monitor:
    """Runs probe/classify/toggle rounds over a fixed list of domains."""

    def __init__(
        self,
        config: AppConfig,
        probe: HealthProbe,
        engine: ToggleEngine,
        logger: Optional[AuditLogger] = None,
        classifier: Optional[HealthClassifier] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the monitor.

        Args:
            config: Application configuration (interval, pacing, auto-toggle)
            probe: Health probe
            engine: Toggle engine
            logger: Optional audit logger
            classifier: Used for log descriptions of probe results
            sleep: Awaitable sleep function (replaced in tests)
        """
        self._config = config
        self._probe = probe
        self._engine = engine
        self._logger = logger
        self._classifier = classifier or HealthClassifier()
        self._sleep = sleep
        self._backoff = BackoffPolicy(config.backoff)
        self._round_number = 0

    @property
    def backoff(self) -> BackoffPolicy:
        return self._backoff

    async def check_domain(self, domain: str) -> DomainReport:
        """Probe one domain and act on its health category."""
        result = await self._probe.probe(domain)
        report = DomainReport(domain=domain, probe=result)
        description = self._classifier.describe(result.category, result.status_code)
        data = {
            "domain": domain,
            "status_code": result.status_code,
            "category": result.category.value,
            "response_time_ms": round(result.response_time_ms, 1),
        }

        if result.category == HealthCategory.CDN_DOWN:
            self._log(LogLevel.WARN, f"{domain} - {description}", data)
            if self._config.auto_toggle:
                self._log(LogLevel.INFO, "Disabling proxy to bypass Cloudflare...", data)
                await self._toggle(report, False)

        elif result.category == HealthCategory.ORIGIN_DOWN:
            self._log(LogLevel.ERROR, f"{domain} - {description}", data)
            self._log(
                LogLevel.INFO,
                "Not toggling proxy - issue is with origin server, not Cloudflare",
                data,
            )

        elif result.category == HealthCategory.UP:
            self._log(LogLevel.INFO, f"{domain} - {description}", data)
            if self._config.auto_toggle:
                await self._toggle(report, True)

        else:
            if result.error:
                data["error"] = result.error
            self._log(LogLevel.ERROR, f"{domain} - {description}", data)

        return report

    async def _toggle(self, report: DomainReport, desired_proxied: bool) -> None:
        report.api_attempted = True
        try:
            report.toggle = await self._engine.toggle(report.domain, desired_proxied)
        except ApiError as e:
            report.api_failed = True
            report.error = str(e)
            self._log_error(f"Toggle failed for {report.domain}", e, report.domain)
        except DnsToggleError as e:
            report.error = e.message
            self._log_error(f"Toggle failed for {report.domain}", e, report.domain)

    async def run_round(self, domains: list[str]) -> RoundReport:
        """
        Run one round over all domains, pausing between them.

        Returns:
            RoundReport with one DomainReport per domain, in order
        """
        self._round_number += 1
        round_report = RoundReport(
            round_number=self._round_number,
            started_at=datetime.now(timezone.utc).isoformat(),
        )

        for domain in domains:
            round_report.reports.append(await self.check_domain(domain))
            await self._sleep(self._config.domain_delay_seconds)

        return round_report

    async def run(
        self,
        domains: list[str],
        stop_event: Optional[asyncio.Event] = None,
        max_rounds: Optional[int] = None,
    ) -> list[RoundReport]:
        """
        Run rounds until stopped.

        Args:
            domains: Domains to watch; the list is fixed for the whole run
            stop_event: Optional event that ends the loop after the current round
            max_rounds: Optional round limit

        Returns:
            Reports of all completed rounds
        """
        domains = list(domains)
        rounds: list[RoundReport] = []

        self._log(
            LogLevel.INFO,
            "Starting monitor mode",
            {
                "domains": domains,
                "check_interval": self._config.check_interval_seconds,
                "auto_toggle": self._config.auto_toggle,
            },
        )

        while True:
            round_report = await self.run_round(domains)
            rounds.append(round_report)

            extra_delay = self._backoff.record_round(round_report.api_failure)
            if extra_delay > 0:
                self._log(
                    LogLevel.WARN,
                    f"Cloudflare API failing, backing off {extra_delay:.0f}s",
                    {"consecutive_failures": self._backoff.consecutive_failures},
                )

            if max_rounds is not None and len(rounds) >= max_rounds:
                break
            if stop_event is not None and stop_event.is_set():
                break

            await self._sleep(self._config.check_interval_seconds + extra_delay)

        return rounds

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "Monitor", message, data)

    def _log_error(self, message: str, error: Exception, domain: str) -> None:
        if self._logger:
            self._logger.log_error("Monitor", message, error, {"domain": domain})
