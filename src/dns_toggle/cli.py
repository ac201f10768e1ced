"""
Command-line interface for the DNS proxy toggle system.

This module provides the main CLI entry point with commands for:
- check: Health and proxy status of domains
- enable / disable: Route domains through Cloudflare or directly to origin
- status: Current proxy status
- monitor: Continuous monitoring with automatic toggling
- restore: Return domains to their original proxy setting
- install-service: Install a systemd unit running the monitor

Every command accepts zero or more domains; with none, the records of the
configured zone are offered for interactive selection.
"""

import argparse
import asyncio
import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from . import __version__
from .audit_logger import AuditLogger, create_logger
from .classifier import HealthClassifier
from .cloudflare_client import CloudflareClient
from .config import DEFAULT_ENV_FILE, AppConfig, load_config
from .domain_validator import DomainValidator
from .enums import ExitCode, HealthCategory
from .exceptions import DependencyMissingError, DnsToggleError, ValidationError
from .health_probe import HealthProbe
from .monitor import Monitor
from .record_locator import RecordLocator
from .service import render_unit, install_service
from .state_store import StateStore
from .toggle_engine import ToggleEngine


PROGRAM_NAME = "cloudflare-dns-toggle"

COMMANDS = ("check", "enable", "disable", "status", "monitor", "restore", "install-service")

HEALTH_MARKERS = {
    HealthCategory.UP: "✓",
    HealthCategory.CDN_DOWN: "✗",
    HealthCategory.ORIGIN_DOWN: "⚠",
    HealthCategory.UNREACHABLE: "✗",
}


class UsageErrorParser(argparse.ArgumentParser):
    """Argument parser that exits with the usage error code."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(ExitCode.USAGE.value, f"{self.prog}: error: {message}\n")


@dataclass
class CommandContext:
    """Components shared by the command handlers of one invocation."""

    config: AppConfig
    probe: HealthProbe
    engine: ToggleEngine
    logger: AuditLogger
    env_file: Path
    input_func: Callable[[str], str] = input


def proxy_label(proxied: Optional[bool]) -> str:
    if proxied is None:
        return "unknown"
    return "🟠 proxied" if proxied else "☁️  direct"


def _fail(ctx: CommandContext, domain: str, error: DnsToggleError) -> int:
    ctx.logger.log_error("CLI", f"{domain}: {error}", error, {"domain": domain})
    print(f"✗ {domain} - {error}", file=sys.stderr)
    return error.exit_code.value


async def select_domains(ctx: CommandContext) -> list[str]:
    """
    Let the operator pick domains from the configured zone.

    Raises:
        DnsToggleError: If no zone is configured, the zone is empty, or
                        nothing valid was selected
    """
    zone_id = ctx.config.zone_id
    if not zone_id:
        raise ValidationError(
            code="no_zone",
            message="CF_ZONE_ID not set and cannot auto-discover without domain",
        )

    ctx.logger.info("CLI", f"Fetching DNS records for zone: {zone_id}", {"zone_id": zone_id})
    records = await ctx.engine.locator.list_zone_records(zone_id)
    if not records:
        raise ValidationError(code="empty_zone", message="No DNS records found in zone")

    print("\nAvailable DNS Records:")
    for number, record in enumerate(records, start=1):
        print(f"  {number:>3}  {record.domain} ({record.record_type}) - Proxied: {str(record.proxied).lower()}")

    selection = ctx.input_func("\nEnter domain numbers to monitor (space-separated, or 'all'): ").strip()

    if selection.lower() == "all":
        selected = [record.domain for record in records]
    else:
        selected = []
        for token in selection.split():
            if token.isdigit() and 1 <= int(token) <= len(records):
                domain = records[int(token) - 1].domain
                if domain not in selected:
                    selected.append(domain)

    if not selected:
        raise ValidationError(code="no_selection", message="No valid domains selected")
    return selected


async def resolve_domains(ctx: CommandContext, raw_domains: list[str]) -> tuple[list[str], int]:
    """
    Validate the given domains, or select them interactively when none are given.

    Invalid names are reported and skipped; the remaining domains are still
    returned.

    Returns:
        Canonical domains and the exit code of the last rejected name
    """
    if not raw_domains:
        return await select_domains(ctx), ExitCode.SUCCESS.value

    validator = DomainValidator()
    domains = []
    exit_code = ExitCode.SUCCESS.value
    for raw in raw_domains:
        try:
            domains.append(validator.canonicalize(raw))
        except ValidationError as e:
            exit_code = _fail(ctx, raw, e)
    return domains, exit_code


async def cmd_check(ctx: CommandContext, domains: list[str]) -> int:
    """Print health and proxy status of each domain."""
    classifier = HealthClassifier()

    for domain in domains:
        proxied: Optional[bool] = None
        try:
            proxied = (await ctx.engine.status(domain)).proxied
        except DnsToggleError as e:
            ctx.logger.debug("CLI", f"Proxy status unavailable for {domain}: {e}", {"domain": domain})

        result = await ctx.probe.probe(domain)
        marker = HEALTH_MARKERS[result.category]
        if result.category == HealthCategory.UP and result.status_code in (401, 403, 404):
            marker = "⚠"
        description = classifier.describe(result.category, result.status_code)
        print(f"{marker} {domain} [{proxy_label(proxied)}] - {description}")

    return ExitCode.SUCCESS.value


async def _cmd_set(ctx: CommandContext, domains: list[str], proxied: bool) -> int:
    exit_code = ExitCode.SUCCESS.value
    for domain in domains:
        try:
            result = await ctx.engine.toggle(domain, proxied)
        except DnsToggleError as e:
            exit_code = _fail(ctx, domain, e)
            continue
        if result.changed:
            print(f"✓ Updated {domain} (proxied={str(result.proxied).lower()})")
        else:
            print(f"✓ {domain} already proxied={str(result.proxied).lower()}")
    return exit_code


async def cmd_enable(ctx: CommandContext, domains: list[str]) -> int:
    """Route domains through Cloudflare."""
    return await _cmd_set(ctx, domains, True)


async def cmd_disable(ctx: CommandContext, domains: list[str]) -> int:
    """Route domains directly to the origin."""
    return await _cmd_set(ctx, domains, False)


async def cmd_status(ctx: CommandContext, domains: list[str]) -> int:
    """Print the current proxy status of each domain."""
    exit_code = ExitCode.SUCCESS.value
    for domain in domains:
        try:
            record = await ctx.engine.status(domain)
        except DnsToggleError as e:
            exit_code = _fail(ctx, domain, e)
            continue
        label = "Proxied (🟠)" if record.proxied else "DNS Only (☁️)"
        print(f"{domain}: {label}")
    return exit_code


async def cmd_restore(ctx: CommandContext, domains: list[str]) -> int:
    """Restore the proxy setting saved before the first toggle."""
    exit_code = ExitCode.SUCCESS.value
    for domain in domains:
        try:
            result = await ctx.engine.restore(domain)
        except DnsToggleError as e:
            exit_code = _fail(ctx, domain, e)
            continue
        if result is None:
            print(f"⚠ No saved state for {domain}")
        else:
            print(f"✓ Restored {domain} (proxied={str(result.proxied).lower()})")
    return exit_code


async def cmd_monitor(ctx: CommandContext, domains: list[str]) -> int:
    """Monitor domains until interrupted."""
    print("Starting monitor mode...")
    print(f"Check interval: {ctx.config.check_interval_seconds:g}s")
    print(f"Domains: {' '.join(domains)}")
    print("Press Ctrl+C to stop\n")

    monitor = Monitor(
        config=ctx.config,
        probe=ctx.probe,
        engine=ctx.engine,
        logger=ctx.logger,
    )
    await monitor.run(domains)
    return ExitCode.SUCCESS.value


async def cmd_install_service(ctx: CommandContext, domains: list[str]) -> int:
    """Install and start the systemd unit."""
    executable = shutil.which(PROGRAM_NAME)
    if executable is None:
        raise DependencyMissingError(
            code="missing_dependency",
            message=f"Missing dependencies: {PROGRAM_NAME} (not on PATH)",
            details={"dependencies": [PROGRAM_NAME]},
        )

    unit = render_unit(
        domains=domains,
        working_directory=ctx.env_file.resolve().parent,
        executable=executable,
        env_file=ctx.env_file.resolve(),
    )

    print("Creating systemd service...")
    try:
        unit_path = install_service(unit)
    except (OSError, subprocess.CalledProcessError) as e:
        ctx.logger.log_error("CLI", f"Service installation failed: {e}", e)
        print(f"✗ Service installation failed: {e}", file=sys.stderr)
        return ExitCode.USAGE.value

    print(f"✓ Service installed and started ({unit_path})")
    print("\nUseful commands:")
    print(f"  sudo systemctl status {unit_path.stem}")
    print(f"  sudo journalctl -u {unit_path.stem} -f")
    print(f"  sudo systemctl stop {unit_path.stem}")
    return ExitCode.SUCCESS.value


HANDLERS = {
    "check": cmd_check,
    "enable": cmd_enable,
    "disable": cmd_disable,
    "status": cmd_status,
    "monitor": cmd_monitor,
    "restore": cmd_restore,
    "install-service": cmd_install_service,
}


async def run_command(
    command: str,
    raw_domains: list[str],
    config: AppConfig,
    logger: AuditLogger,
    env_file: Path,
    input_func: Callable[[str], str] = input,
) -> int:
    """
    Build the components and run one command.

    Returns:
        Exit code
    """
    async with CloudflareClient(
        api_token=config.api_token,
        base_url=config.api_base_url,
        simulation_mode=config.simulation_mode,
    ) as client, HealthProbe(timeout=config.probe_timeout_seconds) as probe:
        engine = ToggleEngine(
            config=config,
            client=client,
            state_store=StateStore(config.state_file),
            locator=RecordLocator(client),
            logger=logger,
        )
        ctx = CommandContext(
            config=config,
            probe=probe,
            engine=engine,
            logger=logger,
            env_file=env_file,
            input_func=input_func,
        )

        try:
            domains, validation_code = await resolve_domains(ctx, raw_domains)
        except DnsToggleError as e:
            logger.log_error("CLI", e.message, e)
            print(f"Error: {e}", file=sys.stderr)
            return e.exit_code.value

        if not domains:
            return validation_code

        try:
            exit_code = await HANDLERS[command](ctx, domains)
            return exit_code if exit_code != ExitCode.SUCCESS.value else validation_code
        except DnsToggleError as e:
            logger.log_error("CLI", e.message, e)
            print(f"Error: {e}", file=sys.stderr)
            return e.exit_code.value


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "domains",
        nargs="*",
        help="Domains to act on (interactive selection if omitted)",
    )
    parser.add_argument(
        "--env-file", "-e",
        default=str(DEFAULT_ENV_FILE),
        help="Path to the env file (default: .env)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Simulation mode - never modify DNS records",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = UsageErrorParser(
        prog=PROGRAM_NAME,
        description="Auto-detect Cloudflare outages and toggle DNS proxy status",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    helps = {
        "check": "Check health status of domains",
        "enable": "Enable Cloudflare proxy (orange cloud)",
        "disable": "Disable Cloudflare proxy (grey cloud)",
        "status": "Show current proxy status",
        "monitor": "Start monitoring mode (auto-toggle)",
        "restore": "Restore original proxy settings",
        "install-service": "Install systemd service for auto-monitoring",
    }
    for command in COMMANDS:
        command_parser = subparsers.add_parser(command, help=helps[command])
        _add_common_arguments(command_parser)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return ExitCode.SUCCESS.value

    env_file = Path(args.env_file)
    try:
        config = load_config(env_file, simulation_mode=args.dry_run)
    except DnsToggleError as e:
        print(f"Error: {e.message} (env file: {env_file})", file=sys.stderr)
        return e.exit_code.value

    logger = create_logger(
        output_format=config.logging.output_format,
        log_file=config.logging.log_file,
        level="debug" if args.verbose else config.logging.level,
    )
    if config.simulation_mode:
        logger.info("CLI", "Simulation mode enabled - DNS records will not be modified")

    try:
        return asyncio.run(run_command(
            command=args.command,
            raw_domains=args.domains,
            config=config,
            logger=logger,
            env_file=env_file,
        ))
    except KeyboardInterrupt:
        logger.info("CLI", "Stopped by operator")
        return ExitCode.SUCCESS.value


if __name__ == "__main__":
    sys.exit(main())
