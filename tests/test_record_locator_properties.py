"""
Tests for zone and record resolution.
"""

import asyncio

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from dns_toggle.exceptions import ApiError, RecordNotFoundError, ZoneNotFoundError
from dns_toggle.record_locator import RecordLocator, base_domain

from fakes import FakeCloudflareApi


label_strategy = st.from_regex(r"[a-z][a-z0-9]{0,9}", fullmatch=True)


def run_locator(api: FakeCloudflareApi, action):
    async def run():
        async with api.client() as client:
            return await action(RecordLocator(client))

    return asyncio.run(run())


class TestBaseDomainProperty:
    """base_domain keeps the two rightmost labels."""

    @given(labels=st.lists(label_strategy, min_size=2, max_size=6))
    @settings(max_examples=100)
    def test_two_rightmost_labels(self, labels: list[str]) -> None:
        domain = ".".join(labels)
        assert base_domain(domain) == ".".join(labels[-2:])

    def test_multi_label_suffix_is_not_special_cased(self) -> None:
        assert base_domain("shop.example.co.uk") == "co.uk"

    def test_trailing_dot_ignored(self) -> None:
        assert base_domain("www.example.com.") == "example.com"


class TestZoneResolution:
    """Exact name first, then the base domain."""

    def test_exact_zone_match(self) -> None:
        api = FakeCloudflareApi()
        zone_id = api.add_zone("example.com")

        assert run_locator(api, lambda loc: loc.resolve_zone("example.com")) == zone_id
        assert api.zone_lookups == ["example.com"]

    @given(sub=label_strategy)
    @settings(max_examples=30)
    def test_subdomain_falls_back_to_base(self, sub: str) -> None:
        api = FakeCloudflareApi()
        zone_id = api.add_zone("example.com")
        domain = f"{sub}.example.com"

        assert run_locator(api, lambda loc: loc.resolve_zone(domain)) == zone_id
        assert api.zone_lookups == [domain, "example.com"]

    def test_unknown_zone_raises_not_found(self) -> None:
        api = FakeCloudflareApi()
        api.add_zone("example.com")

        with pytest.raises(ZoneNotFoundError) as exc_info:
            run_locator(api, lambda loc: loc.resolve_zone("a.other.org"))

        assert exc_info.value.domain == "a.other.org"
        assert exc_info.value.details["candidates"] == ["a.other.org", "other.org"]

    def test_api_failure_is_not_reported_as_not_found(self) -> None:
        api = FakeCloudflareApi()
        api.add_zone("example.com")
        api.fail_status = 403

        with pytest.raises(ApiError):
            run_locator(api, lambda loc: loc.resolve_zone("example.com"))


class TestRecordResolution:
    """Records are matched by exact name."""

    def test_locate_returns_record(self) -> None:
        api = FakeCloudflareApi()
        zone_id = api.add_zone("example.com")
        record_id = api.add_record(zone_id, "www.example.com", True, record_type="CNAME")

        record = run_locator(api, lambda loc: loc.locate("www.example.com"))

        assert record.domain == "www.example.com"
        assert record.zone_id == zone_id
        assert record.record_id == record_id
        assert record.proxied is True
        assert record.record_type == "CNAME"

    def test_missing_record_raises(self) -> None:
        api = FakeCloudflareApi()
        zone_id = api.add_zone("example.com")
        api.add_record(zone_id, "example.com", True)

        with pytest.raises(RecordNotFoundError) as exc_info:
            run_locator(api, lambda loc: loc.locate("api.example.com"))

        assert exc_info.value.zone_id == zone_id
        assert str(exc_info.value) == "Domain not found: api.example.com"

    def test_given_zone_id_skips_zone_lookup(self) -> None:
        api = FakeCloudflareApi()
        zone_id = api.add_zone("example.com")
        api.add_record(zone_id, "example.com", False)

        record = run_locator(api, lambda loc: loc.locate("example.com", zone_id))

        assert record.proxied is False
        assert api.zone_lookups == []

    def test_list_zone_records_filters_types(self) -> None:
        api = FakeCloudflareApi()
        zone_id = api.add_zone("example.com")
        api.add_record(zone_id, "example.com", True, record_type="A")
        api.add_record(zone_id, "example.com", True, record_type="AAAA", content="2001:db8::1")
        api.add_record(zone_id, "example.com", False, record_type="TXT", content="v=spf1 -all")

        records = run_locator(api, lambda loc: loc.list_zone_records(zone_id))

        assert [r.record_type for r in records] == ["A", "AAAA"]
