"""
Property-based tests for Domain Validator module.

Uses Hypothesis to verify normalization and rejection of operator-supplied
domain names.
"""

import idna
import pytest
from hypothesis import given, settings, assume
from hypothesis import strategies as st

from dns_toggle.domain_validator import DomainValidator, MAX_LABEL_LENGTH
from dns_toggle.enums import DomainValidationErrorCode
from dns_toggle.exceptions import ValidationError


@st.composite
def ascii_label_strategy(draw) -> str:
    """Generate valid ASCII labels in mixed case."""
    first = draw(st.sampled_from("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"))
    rest = draw(st.text(
        alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"),
        min_size=0,
        max_size=20,
    ))
    return first + rest


@st.composite
def ascii_domain_strategy(draw) -> str:
    labels = draw(st.lists(ascii_label_strategy(), min_size=1, max_size=3))
    tld = draw(st.sampled_from(["de", "com", "net", "org", "io", "co.uk"]))
    return ".".join(labels + [tld])


@st.composite
def idn_domain_strategy(draw) -> str:
    """Generate domains with one internationalized label."""
    label = draw(st.sampled_from(["münchen", "café", "bücher", "straße", "ñandú", "örnek"]))
    tld = draw(st.sampled_from(["de", "com", "net"]))
    return f"{label}.{tld}"


class TestDomainNormalizationProperty:
    """Normalization yields the lowercase, dotless-suffix, IDNA form."""

    @given(domain=ascii_domain_strategy())
    @settings(max_examples=100)
    def test_ascii_domain_lowercased(self, domain: str) -> None:
        result = DomainValidator().validate(domain)

        assert result.valid
        assert result.canonical_domain == domain.lower()

    @given(domain=ascii_domain_strategy())
    @settings(max_examples=50)
    def test_trailing_dot_and_whitespace_removed(self, domain: str) -> None:
        result = DomainValidator().validate(f"  {domain}.  ")

        assert result.canonical_domain == domain.lower()

    @given(domain=idn_domain_strategy())
    @settings(max_examples=30)
    def test_idn_encoded_as_punycode(self, domain: str) -> None:
        result = DomainValidator().validate(domain)

        assert result.valid
        assert result.canonical_domain.isascii()
        assert result.canonical_domain == idna.encode(domain, uts46=True).decode("ascii")
        assert result.canonical_domain.split(".")[0].startswith("xn--")

    @given(domain=st.one_of(ascii_domain_strategy(), idn_domain_strategy()))
    @settings(max_examples=50)
    def test_normalization_is_idempotent(self, domain: str) -> None:
        validator = DomainValidator()
        once = validator.canonicalize(domain)
        assert validator.canonicalize(once) == once

    def test_wildcard_record_accepted(self) -> None:
        assert DomainValidator().canonicalize("*.Example.com") == "*.example.com"


class TestForbiddenCharactersProperty:
    """Characters that cannot appear in a record name are rejected."""

    @given(
        label=ascii_label_strategy(),
        char=st.sampled_from(list("!@#$%^&()+=[]{}|\\:;\"'<>,?/`~")),
        position=st.integers(min_value=0, max_value=20),
    )
    @settings(max_examples=100)
    def test_forbidden_char_rejected(self, label: str, char: str, position: int) -> None:
        position = min(position, len(label))
        domain = f"{label[:position]}{char}{label[position:]}.com"

        result = DomainValidator().validate(domain)

        assert not result.valid
        assert result.error.code == DomainValidationErrorCode.FORBIDDEN_CHARS

    @pytest.mark.parametrize("raw", ["exa mple.com", "example.c\tom"])
    def test_embedded_whitespace_rejected(self, raw: str) -> None:
        result = DomainValidator().validate(raw)
        assert result.error.code == DomainValidationErrorCode.FORBIDDEN_CHARS

    def test_url_is_rejected(self) -> None:
        result = DomainValidator().validate("https://example.com/")
        assert result.error.code == DomainValidationErrorCode.FORBIDDEN_CHARS


class TestStructuralRejection:
    """Empty input, bare names, and bad labels."""

    @pytest.mark.parametrize("raw", ["", "   ", "\n"])
    def test_empty_input(self, raw: str) -> None:
        result = DomainValidator().validate(raw)
        assert result.error.code == DomainValidationErrorCode.EMPTY_INPUT

    @given(label=ascii_label_strategy())
    @settings(max_examples=30)
    def test_single_label_rejected(self, label: str) -> None:
        result = DomainValidator().validate(label)
        assert result.error.code == DomainValidationErrorCode.MISSING_DOT

    @pytest.mark.parametrize("raw", ["a..example.com", ".example.com"])
    def test_empty_label_rejected(self, raw: str) -> None:
        result = DomainValidator().validate(raw)
        assert result.error.code == DomainValidationErrorCode.INVALID_LABEL

    @given(extra=st.integers(min_value=1, max_value=20))
    @settings(max_examples=10)
    def test_overlong_label_rejected(self, extra: int) -> None:
        label = "a" * (MAX_LABEL_LENGTH + extra)
        result = DomainValidator().validate(f"{label}.com")
        assert result.error.code == DomainValidationErrorCode.INVALID_LABEL

    def test_overlong_domain_rejected(self) -> None:
        domain = ".".join(["a" * 60] * 5) + ".com"
        result = DomainValidator().validate(domain)
        assert result.error.code == DomainValidationErrorCode.TOO_LONG

    def test_canonicalize_raises_validation_error(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            DomainValidator().canonicalize("localhost")

        assert exc_info.value.code == DomainValidationErrorCode.MISSING_DOT.value
        assert "localhost" in exc_info.value.message

    @given(domain=idn_domain_strategy())
    @settings(max_examples=10)
    def test_valid_results_carry_no_error(self, domain: str) -> None:
        result = DomainValidator().validate(domain)
        assume(result.valid)
        assert result.error is None
