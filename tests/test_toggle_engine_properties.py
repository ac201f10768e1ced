"""
Property-based tests for the Toggle Engine.

The engine runs against FakeCloudflareApi with a real StateStore in a
temporary directory.
"""

import asyncio
import io
import tempfile
from pathlib import Path
from typing import Optional

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from dns_toggle.audit_logger import AuditLogger
from dns_toggle.config import AppConfig
from dns_toggle.enums import LogLevel, ToggleOutcome
from dns_toggle.exceptions import ApiError, RecordNotFoundError
from dns_toggle.state_store import StateStore
from dns_toggle.toggle_engine import ToggleEngine

from fakes import FakeCloudflareApi


def run_engine(
    api: FakeCloudflareApi,
    state_file: Path,
    action,
    zone_id: Optional[str] = None,
    logger: Optional[AuditLogger] = None,
    simulation_mode: bool = False,
):
    config = AppConfig(api_token="test-token", state_file=state_file, zone_id=zone_id)

    async def run():
        async with api.client(simulation_mode=simulation_mode) as client:
            engine = ToggleEngine(config, client, StateStore(state_file), logger=logger)
            return await action(engine)

    return asyncio.run(run())


class TestIdempotenceProperty:
    """Reaching the desired flag takes at most one write."""

    @given(initial=st.booleans(), desired=st.booleans(), repeats=st.integers(min_value=1, max_value=4))
    @settings(max_examples=40)
    def test_repeated_toggles_write_at_most_once(self, initial: bool, desired: bool, repeats: int) -> None:
        api = FakeCloudflareApi()
        zone_id = api.add_zone("example.com")
        api.add_record(zone_id, "example.com", initial)

        async def action(engine):
            return [await engine.toggle("example.com", desired) for _ in range(repeats)]

        with tempfile.TemporaryDirectory() as tmpdir:
            results = run_engine(api, Path(tmpdir) / ".state.json", action)

        expected_writes = 0 if initial == desired else 1
        assert len(api.patch_requests) == expected_writes
        assert api.get_record(zone_id, "example.com")["proxied"] is desired
        assert all(r.proxied is desired for r in results)
        assert all(r.outcome == ToggleOutcome.NOOP for r in results[1:])

    def test_already_matching_is_noop(self) -> None:
        api = FakeCloudflareApi()
        zone_id = api.add_zone("example.com")
        api.add_record(zone_id, "example.com", True)

        with tempfile.TemporaryDirectory() as tmpdir:
            result = run_engine(
                api, Path(tmpdir) / ".state.json",
                lambda engine: engine.toggle("example.com", True),
            )

        assert result.outcome == ToggleOutcome.NOOP
        assert result.changed is False
        assert api.patch_requests == []

    def test_toggle_result_describes_change(self) -> None:
        api = FakeCloudflareApi()
        zone_id = api.add_zone("example.com")
        record_id = api.add_record(zone_id, "www.example.com", True)

        with tempfile.TemporaryDirectory() as tmpdir:
            result = run_engine(
                api, Path(tmpdir) / ".state.json",
                lambda engine: engine.toggle("www.example.com", False),
            )

        assert result.outcome == ToggleOutcome.TOGGLED
        assert result.changed is True
        assert result.previous_proxied is True
        assert result.proxied is False
        assert result.record.record_id == record_id
        assert result.record.proxied is False


class TestOriginalStateWriteOnceProperty:
    """The first observed flag is saved and never replaced."""

    @given(
        initial=st.booleans(),
        sequence=st.lists(st.booleans(), min_size=1, max_size=6),
    )
    @settings(max_examples=40)
    def test_original_survives_any_toggle_sequence(self, initial: bool, sequence: list[bool]) -> None:
        api = FakeCloudflareApi()
        zone_id = api.add_zone("example.com")
        api.add_record(zone_id, "example.com", initial)

        async def action(engine):
            for desired in sequence:
                await engine.toggle("example.com", desired)
            return engine.state_store.get("example.com")

        with tempfile.TemporaryDirectory() as tmpdir:
            saved = run_engine(api, Path(tmpdir) / ".state.json", action)

        assert saved.original_proxied is initial

    def test_disable_enable_disable_keeps_first_value(self) -> None:
        api = FakeCloudflareApi()
        zone_id = api.add_zone("example.com")
        record_id = api.add_record(zone_id, "example.com", True)

        async def action(engine):
            await engine.toggle("example.com", False)
            await engine.toggle("example.com", True)
            await engine.toggle("example.com", False)
            return engine.state_store.get("example.com")

        with tempfile.TemporaryDirectory() as tmpdir:
            saved = run_engine(api, Path(tmpdir) / ".state.json", action)

        assert saved.original_proxied is True
        assert saved.record_id == record_id
        assert len(api.patch_requests) == 3

    def test_state_saved_even_for_noop(self) -> None:
        api = FakeCloudflareApi()
        zone_id = api.add_zone("example.com")
        api.add_record(zone_id, "example.com", False)

        async def action(engine):
            await engine.toggle("example.com", False)
            return engine.state_store.get("example.com")

        with tempfile.TemporaryDirectory() as tmpdir:
            saved = run_engine(api, Path(tmpdir) / ".state.json", action)

        assert saved is not None
        assert saved.original_proxied is False


class TestRestore:
    """restore() returns a domain to its saved original flag."""

    def test_restore_re_enables_originally_proxied(self) -> None:
        api = FakeCloudflareApi()
        zone_id = api.add_zone("example.com")
        api.add_record(zone_id, "example.com", True)

        async def action(engine):
            await engine.toggle("example.com", False)
            return await engine.restore("example.com")

        with tempfile.TemporaryDirectory() as tmpdir:
            result = run_engine(api, Path(tmpdir) / ".state.json", action)

        assert result.outcome == ToggleOutcome.TOGGLED
        assert result.proxied is True
        assert api.get_record(zone_id, "example.com")["proxied"] is True
        assert len(api.patch_requests) == 2

    def test_restore_without_state_warns_and_does_nothing(self) -> None:
        api = FakeCloudflareApi()
        zone_id = api.add_zone("example.com")
        api.add_record(zone_id, "example.com", False)
        logger = AuditLogger(output_stream=io.StringIO())

        with tempfile.TemporaryDirectory() as tmpdir:
            result = run_engine(
                api, Path(tmpdir) / ".state.json",
                lambda engine: engine.restore("example.com"),
                logger=logger,
            )

        assert result is None
        assert api.requests == []
        warnings = [e for e in logger.entries if e.level == LogLevel.WARN]
        assert warnings[0].message == "No saved state for example.com"

    def test_restore_when_already_original_is_noop(self) -> None:
        api = FakeCloudflareApi()
        zone_id = api.add_zone("example.com")
        api.add_record(zone_id, "example.com", True)

        async def action(engine):
            await engine.toggle("example.com", True)
            return await engine.restore("example.com")

        with tempfile.TemporaryDirectory() as tmpdir:
            result = run_engine(api, Path(tmpdir) / ".state.json", action)

        assert result.outcome == ToggleOutcome.NOOP
        assert api.patch_requests == []


class TestLookupAndFailures:
    """Zone configuration and API failures."""

    def test_configured_zone_skips_zone_lookup(self) -> None:
        api = FakeCloudflareApi()
        zone_id = api.add_zone("example.com")
        api.add_record(zone_id, "example.com", True)

        with tempfile.TemporaryDirectory() as tmpdir:
            run_engine(
                api, Path(tmpdir) / ".state.json",
                lambda engine: engine.toggle("example.com", False),
                zone_id=zone_id,
            )

        assert api.zone_lookups == []

    def test_status_reads_without_saving(self) -> None:
        api = FakeCloudflareApi()
        zone_id = api.add_zone("example.com")
        api.add_record(zone_id, "example.com", True)

        async def action(engine):
            record = await engine.status("example.com")
            return record, engine.state_store.get("example.com")

        with tempfile.TemporaryDirectory() as tmpdir:
            record, saved = run_engine(api, Path(tmpdir) / ".state.json", action)

        assert record.proxied is True
        assert saved is None

    def test_patch_failure_raises_once_without_retry(self) -> None:
        api = FakeCloudflareApi()
        zone_id = api.add_zone("example.com")
        api.add_record(zone_id, "example.com", True)
        api.fail_patch_status = 403

        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(ApiError) as exc_info:
                run_engine(
                    api, Path(tmpdir) / ".state.json",
                    lambda engine: engine.toggle("example.com", False),
                )

        assert exc_info.value.status_code == 403
        assert len(api.patch_requests) == 1
        assert api.get_record(zone_id, "example.com")["proxied"] is True

    def test_missing_record_raises_not_found(self) -> None:
        api = FakeCloudflareApi()
        api.add_zone("example.com")

        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(RecordNotFoundError):
                run_engine(
                    api, Path(tmpdir) / ".state.json",
                    lambda engine: engine.toggle("example.com", False),
                )

    def test_simulation_mode_saves_state_but_sends_no_write(self) -> None:
        api = FakeCloudflareApi()
        zone_id = api.add_zone("example.com")
        api.add_record(zone_id, "example.com", True)

        async def action(engine):
            result = await engine.toggle("example.com", False)
            return result, engine.state_store.get("example.com")

        with tempfile.TemporaryDirectory() as tmpdir:
            result, saved = run_engine(
                api, Path(tmpdir) / ".state.json", action, simulation_mode=True
            )

        assert result.outcome == ToggleOutcome.TOGGLED
        assert saved.original_proxied is True
        assert api.patch_requests == []
        assert api.get_record(zone_id, "example.com")["proxied"] is True
