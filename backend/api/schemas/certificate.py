"""Certificate request / response schemas"""
from datetime import date, datetime
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from config import settings
from domain.entities.certificate import (
    BilingualText, CertificateRecord, Issuance, LandDescriptor, LandLocation, OwnerIdentity,
)
from domain.enums import AssetSlot, CertificateStatus, LandUseType, SizeUnit
from domain.legal_text import default_legal_text


# ==================== shared parts ====================

class BilingualTextSchema(BaseModel):
    primary: str = Field(..., min_length=1, max_length=255)
    local: Optional[str] = Field(None, max_length=255)

    class Config:
        from_attributes = True

    def to_entity(self) -> BilingualText:
        return BilingualText(primary=self.primary.strip(), local=(self.local or "").strip() or None)


class LongBilingualTextSchema(BilingualTextSchema):
    primary: str = Field("", max_length=5000)
    local: Optional[str] = Field(None, max_length=5000)


class OwnerSchema(BaseModel):
    first_name: BilingualTextSchema
    last_name: BilingualTextSchema
    national_id: str = Field(..., min_length=1, max_length=50)
    phone: str = Field(..., max_length=20)
    address: BilingualTextSchema
    date_of_birth: Optional[date] = None

    class Config:
        from_attributes = True


class LocationSchema(BaseModel):
    region: BilingualTextSchema
    zone: BilingualTextSchema
    woreda: BilingualTextSchema
    kebele: BilingualTextSchema
    block: Optional[str] = Field(None, max_length=50)

    class Config:
        from_attributes = True


class LandSchema(BaseModel):
    location: LocationSchema
    size: float = Field(..., gt=0)
    size_unit: SizeUnit = SizeUnit.SQUARE_METERS
    land_use: LandUseType
    description: LongBilingualTextSchema = Field(default_factory=LongBilingualTextSchema)

    class Config:
        from_attributes = True


class IssuanceSchema(BaseModel):
    issued_date: Optional[date] = None  # defaults to today
    expiration_date: Optional[date] = None
    issuing_authority: Optional[BilingualTextSchema] = None  # defaults to the configured authority

    class Config:
        from_attributes = True


class LegalTextSchema(BaseModel):
    rights: LongBilingualTextSchema
    terms: LongBilingualTextSchema

    class Config:
        from_attributes = True


# ==================== requests ====================

class CertificateCreateRequest(BaseModel):
    """The `record` part of the multipart issue request"""
    parcel_id: str = Field(..., min_length=1, max_length=64)
    owner: OwnerSchema
    land: LandSchema
    issuance: IssuanceSchema = Field(default_factory=IssuanceSchema)
    status: Literal["draft", "pending"] = "pending"
    # Remote URL or data URI per slot; an uploaded file for the same slot wins
    assets: Dict[AssetSlot, str] = Field(default_factory=dict)

    def to_record(self, today: date) -> CertificateRecord:
        owner, land, issuance = self.owner, self.land, self.issuance
        location = land.location
        authority = (issuance.issuing_authority.to_entity() if issuance.issuing_authority
                     else BilingualText(settings.ISSUING_AUTHORITY, settings.ISSUING_AUTHORITY_LOCAL or None))
        return CertificateRecord(
            parcel_id=self.parcel_id.strip(),
            owner=OwnerIdentity(
                first_name=owner.first_name.to_entity(),
                last_name=owner.last_name.to_entity(),
                national_id=owner.national_id.strip(),
                phone=owner.phone.strip(),
                address=owner.address.to_entity(),
                date_of_birth=owner.date_of_birth,
            ),
            land=LandDescriptor(
                location=LandLocation(
                    region=location.region.to_entity(),
                    zone=location.zone.to_entity(),
                    woreda=location.woreda.to_entity(),
                    kebele=location.kebele.to_entity(),
                    block=location.block,
                ),
                size=land.size,
                size_unit=land.size_unit,
                land_use=land.land_use,
                description=BilingualText(land.description.primary, land.description.local or None),
            ),
            legal=default_legal_text(),
            issuance=Issuance(
                issued_date=issuance.issued_date or today,
                expiration_date=issuance.expiration_date,
                issuing_authority=authority,
            ),
            status=CertificateStatus(self.status),
        )


class BilingualTextChanges(BaseModel):
    primary: Optional[str] = Field(None, min_length=1, max_length=5000)
    local: Optional[str] = Field(None, max_length=5000)


class OwnerChanges(BaseModel):
    first_name: Optional[BilingualTextChanges] = None
    last_name: Optional[BilingualTextChanges] = None
    national_id: Optional[str] = Field(None, min_length=1, max_length=50)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[BilingualTextChanges] = None
    date_of_birth: Optional[date] = None


class LocationChanges(BaseModel):
    region: Optional[BilingualTextChanges] = None
    zone: Optional[BilingualTextChanges] = None
    woreda: Optional[BilingualTextChanges] = None
    kebele: Optional[BilingualTextChanges] = None
    block: Optional[str] = Field(None, max_length=50)


class LandChanges(BaseModel):
    location: Optional[LocationChanges] = None
    size: Optional[float] = Field(None, gt=0)
    size_unit: Optional[SizeUnit] = None
    land_use: Optional[LandUseType] = None
    description: Optional[BilingualTextChanges] = None


class IssuanceChanges(BaseModel):
    issued_date: Optional[date] = None
    expiration_date: Optional[date] = None
    issuing_authority: Optional[BilingualTextChanges] = None


class CertificateChangesRequest(BaseModel):
    """The `changes` part of the multipart edit request; only given fields change"""
    parcel_id: Optional[str] = Field(None, min_length=1, max_length=64)
    owner: Optional[OwnerChanges] = None
    land: Optional[LandChanges] = None
    issuance: Optional[IssuanceChanges] = None
    status: Optional[CertificateStatus] = None
    assets: Dict[AssetSlot, str] = Field(default_factory=dict)

    def record_changes(self) -> dict:
        """Given fields only; an explicit null clears an optional field and is dropped elsewhere"""
        return _drop_nulls(self.model_dump(exclude_unset=True, exclude={"status", "assets"}))


# Optional record fields an edit may clear with null
CLEARABLE_FIELDS = frozenset({"local", "date_of_birth", "block", "expiration_date"})


def _drop_nulls(changes: dict) -> dict:
    cleaned = {}
    for name, value in changes.items():
        if isinstance(value, dict):
            cleaned[name] = _drop_nulls(value)
        elif value is not None or name in CLEARABLE_FIELDS:
            cleaned[name] = value
    return cleaned


# ==================== responses ====================

class CertificateResponse(BaseModel):
    id: int
    certificate_number: str
    registration_number: str
    parcel_id: str
    status: CertificateStatus
    effective_status: CertificateStatus
    owner: OwnerSchema
    land: LandSchema
    legal: LegalTextSchema
    issuance: IssuanceSchema
    artifact_sha256: Optional[str] = None
    asset_outcomes: Dict[str, str] = {}
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: CertificateRecord, today: date) -> "CertificateResponse":
        return cls(
            id=record.id,
            certificate_number=record.certificate_number,
            registration_number=record.registration_number,
            parcel_id=record.parcel_id,
            status=record.status,
            effective_status=record.effective_status(today),
            owner=OwnerSchema.model_validate(record.owner, from_attributes=True),
            land=LandSchema.model_validate(record.land, from_attributes=True),
            legal=LegalTextSchema.model_validate(record.legal, from_attributes=True),
            issuance=IssuanceSchema.model_validate(record.issuance, from_attributes=True),
            artifact_sha256=record.artifact_sha256,
            asset_outcomes={slot.value: outcome for slot, outcome in record.asset_outcomes.items()},
            created_by=record.created_by,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class CertificateSummary(BaseModel):
    id: int
    certificate_number: str
    registration_number: str
    parcel_id: str
    owner_name: str
    status: CertificateStatus
    effective_status: CertificateStatus
    issued_date: date
    expiration_date: Optional[date] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: CertificateRecord, today: date) -> "CertificateSummary":
        return cls(id=record.id, certificate_number=record.certificate_number,
                   registration_number=record.registration_number, parcel_id=record.parcel_id,
                   owner_name=record.owner.display_name, status=record.status,
                   effective_status=record.effective_status(today),
                   issued_date=record.issuance.issued_date,
                   expiration_date=record.issuance.expiration_date, created_at=record.created_at)


class CertificateListResponse(BaseModel):
    items: List[CertificateSummary]
    total: int
    page: int
    page_size: int


class PublicCertificateSchema(BaseModel):
    certificate_number: str
    owner_name: str
    owner_name_local: Optional[str] = None
    national_id_masked: str
    region: str
    zone: str
    woreda: str
    kebele: str
    land_size: float
    size_unit: str
    land_use: str
    issued_date: date
    expiration_date: Optional[date] = None
    issuing_authority: str
    issuing_authority_local: Optional[str] = None

    class Config:
        from_attributes = True


class VerificationResponse(BaseModel):
    found: bool
    status: str
    record: Optional[PublicCertificateSchema] = None

    class Config:
        from_attributes = True
