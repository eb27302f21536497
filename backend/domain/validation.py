"""
Business rules for certificate records

Request schemas already check types and shapes; these are the rules that
also apply to records built outside the HTTP layer (CLI, imports).
"""
import re
from dataclasses import fields, is_dataclass, replace
from datetime import date
from typing import Any, Dict

from domain.entities.certificate import BilingualText, CertificateRecord
from domain.exceptions import ValidationError

MINIMUM_OWNER_AGE = 18

# 10 digits starting with 0 (0911223344) or 9 digits without it (911223344)
PHONE_RE = re.compile(r'^(0\d{9}|[1-9]\d{8})$')

# Top-level fields that an edit may never touch
PROTECTED_FIELDS = {
    "id", "certificate_number", "registration_number", "status", "created_by",
    "artifact_sha256", "asset_outcomes", "created_at", "updated_at", "legal",
}


def _age_on(birth: date, today: date) -> int:
    return today.year - birth.year - ((today.month, today.day) < (birth.month, birth.day))


def _required(errors: Dict[str, str], name: str, value) -> None:
    text = value.primary if isinstance(value, BilingualText) else value
    if not text or not str(text).strip():
        errors[name] = "is required"


def validate_record(record: CertificateRecord, today: date) -> None:
    """Raise ValidationError listing every broken rule"""
    errors: Dict[str, str] = {}
    owner, land, issuance = record.owner, record.land, record.issuance
    location = land.location

    _required(errors, "parcel_id", record.parcel_id)
    _required(errors, "owner.first_name", owner.first_name)
    _required(errors, "owner.last_name", owner.last_name)
    _required(errors, "owner.national_id", owner.national_id)
    _required(errors, "owner.address", owner.address)
    for name in ("region", "zone", "woreda", "kebele"):
        _required(errors, f"land.location.{name}", getattr(location, name))

    if not PHONE_RE.match(owner.phone or ""):
        errors["owner.phone"] = "must be 10 digits starting with 0 or 9 digits without it"
    if owner.date_of_birth is not None:
        if owner.date_of_birth > today:
            errors["owner.date_of_birth"] = "cannot be in the future"
        elif _age_on(owner.date_of_birth, today) < MINIMUM_OWNER_AGE:
            errors["owner.date_of_birth"] = f"owner must be at least {MINIMUM_OWNER_AGE} years old"

    if not land.size or land.size <= 0:
        errors["land.size"] = "must be greater than zero"

    if issuance.expiration_date is not None and issuance.expiration_date <= issuance.issued_date:
        errors["issuance.expiration_date"] = "must be after the issued date"

    if errors:
        raise ValidationError(errors)


def apply_changes(target: Any, changes: Dict[str, Any], path: str = "") -> Any:
    """
    Return a copy of a (nested) dataclass with the given changes applied.

    changes mirrors the record structure, e.g.
    {"owner": {"phone": "0911223344"}, "land": {"size": 750.0}}
    """
    known = {f.name for f in fields(target)}
    updates = {}
    for name, value in changes.items():
        qualified = f"{path}{name}"
        if name not in known or (not path and name in PROTECTED_FIELDS):
            raise ValidationError({qualified: "cannot be changed"})
        current = getattr(target, name)
        if is_dataclass(current) and isinstance(value, dict):
            value = apply_changes(current, value, f"{qualified}.")
        updates[name] = value
    return replace(target, **updates)
