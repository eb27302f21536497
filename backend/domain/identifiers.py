"""
Certificate / registration number generation

Numbers look like PREFIX-YYYY-NNNNNN. The generator only produces candidates;
uniqueness is enforced by the registry's unique constraints and the issuing
use case retries on collision.
"""
import re
import secrets
from datetime import datetime
from typing import Callable, Optional

from domain.exceptions import ValidationError


NUMBER_RE = re.compile(r'^[A-Z]+-\d{4}-\d{6}$')
PREFIX_RE = re.compile(r'^[A-Z]+$')


class IdentifierGenerator:
    """Produces human-readable certificate and registration numbers"""

    def __init__(self, certificate_prefix: str = "LRMS", registration_prefix: str = "REG",
                 clock: Callable[[], datetime] = datetime.utcnow):
        for prefix in (certificate_prefix, registration_prefix):
            if not PREFIX_RE.match(prefix):
                raise ValueError(f"Number prefix must be upper-case letters: {prefix!r}")
        self.certificate_prefix = certificate_prefix
        self.registration_prefix = registration_prefix
        self._clock = clock

    def _generate(self, prefix: str) -> str:
        year = self._clock().year
        return f"{prefix}-{year:04d}-{secrets.randbelow(1_000_000):06d}"

    def generate_certificate_number(self) -> str:
        return self._generate(self.certificate_prefix)

    def generate_registration_number(self) -> str:
        return self._generate(self.registration_prefix)


def is_valid_number(value: Optional[str], prefix: Optional[str] = None) -> bool:
    if not value or not NUMBER_RE.match(value):
        return False
    return prefix is None or value.split("-", 1)[0] == prefix


def validate_number(value: Optional[str], prefix: Optional[str] = None,
                    field: str = "certificate_number") -> str:
    """Reject externally supplied numbers that do not match PREFIX-YYYY-NNNNNN"""
    if not is_valid_number(value, prefix):
        expected = f"{prefix}-YYYY-NNNNNN" if prefix else "PREFIX-YYYY-NNNNNN"
        raise ValidationError({field: f"must match the format {expected}"})
    return value
