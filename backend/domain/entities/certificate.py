"""Certificate domain entity"""
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Dict, Optional

from domain.enums import CertificateStatus, SizeUnit, LandUseType, AssetSlot
from domain.exceptions import InvalidTransitionError, ImmutableCertificateError


# Stored lifecycle. EXPIRED is never a stored target and REVOKED is terminal.
ALLOWED_TRANSITIONS = {
    CertificateStatus.DRAFT: {CertificateStatus.PENDING},
    CertificateStatus.PENDING: {CertificateStatus.ACTIVE},
    CertificateStatus.ACTIVE: {CertificateStatus.REVOKED},
    CertificateStatus.REVOKED: set(),
}

EDITABLE_STATUSES = {CertificateStatus.DRAFT, CertificateStatus.PENDING}


@dataclass(frozen=True)
class BilingualText:
    """One labeled concept in the primary language plus an optional local translation"""
    primary: str
    local: Optional[str] = None

    def display(self, separator: str = " / ") -> str:
        if self.local:
            return f"{self.primary}{separator}{self.local}"
        return self.primary


@dataclass(frozen=True)
class OwnerIdentity:
    first_name: BilingualText
    last_name: BilingualText
    national_id: str
    phone: str
    address: BilingualText
    date_of_birth: Optional[date] = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name.primary} {self.last_name.primary}".strip()

    @property
    def local_display_name(self) -> Optional[str]:
        if self.first_name.local and self.last_name.local:
            return f"{self.first_name.local} {self.last_name.local}"
        return None


@dataclass(frozen=True)
class LandLocation:
    region: BilingualText
    zone: BilingualText
    woreda: BilingualText
    kebele: BilingualText
    block: Optional[str] = None


@dataclass(frozen=True)
class LandDescriptor:
    location: LandLocation
    size: float
    size_unit: SizeUnit
    land_use: LandUseType
    description: BilingualText


@dataclass(frozen=True)
class LegalText:
    rights: BilingualText
    terms: BilingualText


@dataclass(frozen=True)
class Issuance:
    issued_date: date
    issuing_authority: BilingualText
    expiration_date: Optional[date] = None


@dataclass
class CertificateRecord:
    """Canonical certificate record, independent of the ORM model"""
    parcel_id: str
    owner: OwnerIdentity
    land: LandDescriptor
    legal: LegalText
    issuance: Issuance
    certificate_number: str = ""
    registration_number: str = ""
    status: CertificateStatus = CertificateStatus.PENDING
    id: Optional[int] = None
    created_by: Optional[int] = None
    artifact_sha256: Optional[str] = None
    # slot -> outcome value, filled in from the persisted assets
    asset_outcomes: Dict[AssetSlot, str] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def effective_status(self, today: date) -> CertificateStatus:
        """Status as seen at read time. Expiry is derived, never stored."""
        expiration = self.issuance.expiration_date
        if (self.status == CertificateStatus.ACTIVE
                and expiration is not None and today > expiration):
            return CertificateStatus.EXPIRED
        return self.status

    @property
    def is_editable(self) -> bool:
        return self.status in EDITABLE_STATUSES

    def ensure_editable(self) -> None:
        if not self.is_editable:
            raise ImmutableCertificateError(self.status.value)

    def with_numbers(self, certificate_number: str, registration_number: str) -> "CertificateRecord":
        return replace(self, certificate_number=certificate_number,
                       registration_number=registration_number)


def ensure_transition(current: CertificateStatus, target: CertificateStatus) -> None:
    """Raise InvalidTransitionError unless current -> target is a stored transition"""
    if target not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidTransitionError(current.value, target.value)
