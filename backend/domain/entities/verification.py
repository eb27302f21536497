"""Verification value objects"""
from dataclasses import dataclass
from datetime import date
from typing import Optional

from domain.entities.certificate import CertificateRecord
from domain.enums import VerificationStatus


@dataclass(frozen=True)
class VerificationPayload:
    """Minimal lookup payload embedded in the optical code. Not persisted."""
    certificate_number: str
    owner_display_name: str
    issued_date: date

    @classmethod
    def for_record(cls, record: CertificateRecord) -> "VerificationPayload":
        return cls(certificate_number=record.certificate_number,
                   owner_display_name=record.owner.display_name,
                   issued_date=record.issuance.issued_date)

    def to_wire(self) -> dict:
        # Key order is fixed so encoding stays deterministic
        return {
            "certificateNumber": self.certificate_number,
            "ownerName": self.owner_display_name,
            "issueDate": self.issued_date.isoformat(),
        }


@dataclass(frozen=True)
class PublicCertificateView:
    """Redacted record safe for unauthenticated disclosure"""
    certificate_number: str
    owner_name: str
    owner_name_local: Optional[str]
    national_id_masked: str
    region: str
    zone: str
    woreda: str
    kebele: str
    land_size: float
    size_unit: str
    land_use: str
    issued_date: date
    expiration_date: Optional[date]
    issuing_authority: str
    issuing_authority_local: Optional[str]

    @classmethod
    def from_record(cls, record: CertificateRecord) -> "PublicCertificateView":
        location = record.land.location
        return cls(
            certificate_number=record.certificate_number,
            owner_name=record.owner.display_name,
            owner_name_local=record.owner.local_display_name,
            national_id_masked=mask_national_id(record.owner.national_id),
            region=location.region.primary,
            zone=location.zone.primary,
            woreda=location.woreda.primary,
            kebele=location.kebele.primary,
            land_size=record.land.size,
            size_unit=record.land.size_unit.value,
            land_use=record.land.land_use.value,
            issued_date=record.issuance.issued_date,
            expiration_date=record.issuance.expiration_date,
            issuing_authority=record.issuance.issuing_authority.primary,
            issuing_authority_local=record.issuance.issuing_authority.local,
        )


@dataclass(frozen=True)
class VerificationResult:
    found: bool
    status: VerificationStatus
    record: Optional[PublicCertificateView] = None

    @classmethod
    def not_found(cls) -> "VerificationResult":
        return cls(found=False, status=VerificationStatus.NOT_FOUND)


def mask_national_id(national_id: str) -> str:
    """Keep the first two and last two characters"""
    value = national_id or ""
    if len(value) <= 4:
        return "*" * len(value)
    return f"{value[:2]}{'*' * (len(value) - 4)}{value[-2:]}"
