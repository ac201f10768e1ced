"""
Domain validation and normalization module.

Operator-supplied names are normalized to the form Cloudflare stores record
names in (lowercase, no trailing dot, IDNA-encoded) before any API call.
"""

import re
from dataclasses import dataclass
from typing import Optional

import idna

from .enums import DomainValidationErrorCode
from .exceptions import ValidationError


# Forbidden characters in domain names (control chars, spaces, special symbols).
# '*' is allowed for wildcard records.
FORBIDDEN_CHARS_PATTERN = re.compile(
    r'[\x00-\x1f\x7f'
    r'\s'
    r'!@#$%^&()+=\[\]{}|\\:;"\'<>,?/`~]'
)

MAX_DOMAIN_LENGTH = 253
MAX_LABEL_LENGTH = 63


@dataclass
class DomainValidationError:
    """Structured error information for domain validation failures."""

    code: DomainValidationErrorCode
    message: str
    details: dict


@dataclass
class DomainValidationResult:
    """Result of domain validation operation."""

    valid: bool
    canonical_domain: Optional[str]
    error: Optional[DomainValidationError]


class DomainValidator:
    """
    Validates and normalizes domain names.

    Handles:
    - Conversion to lowercase canonical form without trailing dot
    - IDNA encoding for international characters
    - Rejection of forbidden characters, empty and oversized labels
    """

    def validate(self, raw_domain: str) -> DomainValidationResult:
        """
        Validate and normalize a domain string.

        Args:
            raw_domain: The raw domain string to validate

        Returns:
            DomainValidationResult with validation status and canonical form or error
        """
        if not raw_domain or not raw_domain.strip():
            return self._invalid(
                DomainValidationErrorCode.EMPTY_INPUT,
                "Domain input is empty",
                {"raw_input": raw_domain},
            )

        domain = raw_domain.strip()

        if FORBIDDEN_CHARS_PATTERN.search(domain):
            return self._invalid(
                DomainValidationErrorCode.FORBIDDEN_CHARS,
                "Domain contains forbidden characters",
                {
                    "raw_input": raw_domain,
                    "forbidden_chars": FORBIDDEN_CHARS_PATTERN.findall(domain),
                },
            )

        try:
            canonical = self.normalize_to_canonical(domain)
        except ValidationError as e:
            return self._invalid(DomainValidationErrorCode.IDNA_ERROR, e.message, e.details)

        if "." not in canonical:
            return self._invalid(
                DomainValidationErrorCode.MISSING_DOT,
                "Domain must contain at least one dot",
                {"raw_input": raw_domain, "canonical": canonical},
            )

        if len(canonical) > MAX_DOMAIN_LENGTH:
            return self._invalid(
                DomainValidationErrorCode.TOO_LONG,
                f"Domain is longer than {MAX_DOMAIN_LENGTH} characters",
                {"raw_input": raw_domain, "length": len(canonical)},
            )

        for label in canonical.split("."):
            if not label or len(label) > MAX_LABEL_LENGTH:
                return self._invalid(
                    DomainValidationErrorCode.INVALID_LABEL,
                    f"Invalid label {label!r}",
                    {"raw_input": raw_domain, "label": label},
                )

        return DomainValidationResult(
            valid=True,
            canonical_domain=canonical,
            error=None,
        )

    def normalize_to_canonical(self, domain: str) -> str:
        """
        Convert domain to canonical form (lowercase, no trailing dot, IDNA-encoded).

        Raises:
            ValidationError: If IDNA encoding fails
        """
        domain_lower = domain.lower()
        if domain_lower.endswith("."):
            domain_lower = domain_lower[:-1]

        if not any(ord(c) > 127 for c in domain_lower):
            return domain_lower

        try:
            return idna.encode(domain_lower, uts46=True).decode("ascii")
        except idna.IDNAError as e:
            raise ValidationError(
                code=DomainValidationErrorCode.IDNA_ERROR.value,
                message=f"IDNA encoding failed: {e}",
                details={"domain": domain, "idna_error": str(e)},
            )

    def canonicalize(self, raw_domain: str) -> str:
        """
        Return the canonical form of a domain or raise.

        Raises:
            ValidationError: If the domain is invalid
        """
        result = self.validate(raw_domain)
        if not result.valid:
            raise ValidationError(
                code=result.error.code.value,
                message=f"{result.error.message}: {raw_domain!r}",
                details=result.error.details,
            )
        return result.canonical_domain

    @staticmethod
    def _invalid(
        code: DomainValidationErrorCode, message: str, details: dict
    ) -> DomainValidationResult:
        return DomainValidationResult(
            valid=False,
            canonical_domain=None,
            error=DomainValidationError(code=code, message=message, details=details),
        )
