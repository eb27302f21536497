"""Domain enums"""
import enum


class UserRole(str, enum.Enum):
    REGISTRATION = "registration"
    ADMIN = "admin"


class CertificateStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING = "pending"
    ACTIVE = "active"
    EXPIRED = "expired"  # computed at read time, never stored
    REVOKED = "revoked"


class VerificationStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING = "pending"
    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"
    NOT_FOUND = "not_found"


class SizeUnit(str, enum.Enum):
    SQUARE_METERS = "square_meters"
    HECTARES = "hectares"
    ACRES = "acres"


class LandUseType(str, enum.Enum):
    RESIDENTIAL = "residential"
    AGRICULTURAL = "agricultural"
    COMMERCIAL = "commercial"
    INDUSTRIAL = "industrial"
    MIXED_USE = "mixed_use"


class AssetKind(str, enum.Enum):
    PROFILE_PHOTO = "profile_photo"
    SIGNATURE = "signature"
    LAND_PLAN = "land_plan"
    EMBLEM = "emblem"


class AssetSlot(str, enum.Enum):
    OWNER_PHOTO = "owner_photo"
    LAND_PHOTO = "land_photo"
    BOUNDARY_PHOTO = "boundary_photo"
    LAND_PLAN_IMAGE = "land_plan_image"
    OWNER_SIGNATURE = "owner_signature"
    OFFICER_SIGNATURE = "officer_signature"
    EMBLEM = "emblem"

    @property
    def kind(self) -> AssetKind:
        return SLOT_KINDS[self]


SLOT_KINDS = {
    AssetSlot.OWNER_PHOTO: AssetKind.PROFILE_PHOTO,
    AssetSlot.LAND_PHOTO: AssetKind.LAND_PLAN,
    AssetSlot.BOUNDARY_PHOTO: AssetKind.LAND_PLAN,
    AssetSlot.LAND_PLAN_IMAGE: AssetKind.LAND_PLAN,
    AssetSlot.OWNER_SIGNATURE: AssetKind.SIGNATURE,
    AssetSlot.OFFICER_SIGNATURE: AssetKind.SIGNATURE,
    AssetSlot.EMBLEM: AssetKind.EMBLEM,
}

# The six record slots; the emblem is jurisdiction-wide
RECORD_SLOTS = [slot for slot in AssetSlot if slot is not AssetSlot.EMBLEM]


class AssetOutcome(str, enum.Enum):
    RESOLVED = "resolved"
    FALLBACK_USED = "fallback-used"
    FAILED = "failed"
