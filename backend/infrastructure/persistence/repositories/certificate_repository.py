"""
SQLAlchemy certificate registry

The registry is the single source of truth for certificate records.
Uniqueness (numbers, one live certificate per parcel) is enforced by the
database; violations surface as DuplicateError naming the field.
"""
from datetime import datetime
from typing import List, Optional, Tuple

from loguru import logger
from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload, defer

from application.ports.certificate_repository import CertificateRepository
from domain.entities.asset import ResolvedAsset, ResolvedAssets
from domain.entities.certificate import (
    BilingualText, CertificateRecord, Issuance, LandDescriptor, LandLocation,
    LegalText, OwnerIdentity, ensure_transition,
)
from domain.enums import AssetOutcome, AssetSlot, CertificateStatus
from domain.exceptions import (
    CertificateNotFoundError, DuplicateError, InvalidTransitionError,
)
from infrastructure.persistence.models.certificate import Certificate
from infrastructure.persistence.models.certificate_asset import CertificateAsset

# Checked in order; the parcel index name also contains "parcel"
_UNIQUE_FIELDS = ("certificate_number", "registration_number", "parcel")


def _bi(primary: Optional[str], local: Optional[str]) -> BilingualText:
    return BilingualText(primary=primary or "", local=local or None)


def to_entity(model: Certificate) -> CertificateRecord:
    """ORM model -> domain record"""
    return CertificateRecord(
        id=model.id,
        certificate_number=model.certificate_number,
        registration_number=model.registration_number,
        parcel_id=model.parcel_id,
        status=model.status,
        owner=OwnerIdentity(
            first_name=_bi(model.owner_first_name, model.owner_first_name_local),
            last_name=_bi(model.owner_last_name, model.owner_last_name_local),
            national_id=model.owner_national_id,
            phone=model.owner_phone,
            address=_bi(model.owner_address, model.owner_address_local),
            date_of_birth=model.owner_date_of_birth,
        ),
        land=LandDescriptor(
            location=LandLocation(
                region=_bi(model.region, model.region_local),
                zone=_bi(model.zone, model.zone_local),
                woreda=_bi(model.woreda, model.woreda_local),
                kebele=_bi(model.kebele, model.kebele_local),
                block=model.block,
            ),
            size=model.land_size,
            size_unit=model.size_unit,
            land_use=model.land_use,
            description=_bi(model.description, model.description_local),
        ),
        legal=LegalText(
            rights=_bi(model.rights, model.rights_local),
            terms=_bi(model.terms, model.terms_local),
        ),
        issuance=Issuance(
            issued_date=model.issued_date,
            expiration_date=model.expiration_date,
            issuing_authority=_bi(model.issuing_authority, model.issuing_authority_local),
        ),
        created_by=model.created_by,
        artifact_sha256=model.artifact_sha256,
        asset_outcomes={AssetSlot(asset.slot): asset.outcome for asset in model.assets},
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _columns(record: CertificateRecord) -> dict:
    """Domain record -> column values (everything except identity and audit columns)"""
    owner, land, legal, issuance = record.owner, record.land, record.legal, record.issuance
    location = land.location
    return dict(
        parcel_id=record.parcel_id,
        owner_first_name=owner.first_name.primary,
        owner_first_name_local=owner.first_name.local,
        owner_last_name=owner.last_name.primary,
        owner_last_name_local=owner.last_name.local,
        owner_national_id=owner.national_id,
        owner_phone=owner.phone,
        owner_address=owner.address.primary,
        owner_address_local=owner.address.local,
        owner_date_of_birth=owner.date_of_birth,
        region=location.region.primary,
        region_local=location.region.local,
        zone=location.zone.primary,
        zone_local=location.zone.local,
        woreda=location.woreda.primary,
        woreda_local=location.woreda.local,
        kebele=location.kebele.primary,
        kebele_local=location.kebele.local,
        block=location.block,
        land_size=land.size,
        size_unit=land.size_unit,
        land_use=land.land_use,
        description=land.description.primary,
        description_local=land.description.local,
        rights=legal.rights.primary,
        rights_local=legal.rights.local,
        terms=legal.terms.primary,
        terms_local=legal.terms.local,
        issued_date=issuance.issued_date,
        expiration_date=issuance.expiration_date,
        issuing_authority=issuance.issuing_authority.primary,
        issuing_authority_local=issuance.issuing_authority.local,
        artifact_sha256=record.artifact_sha256,
    )


def _asset_row(slot: AssetSlot, asset: ResolvedAsset) -> CertificateAsset:
    return CertificateAsset(slot=slot, kind=asset.kind, media_type=asset.media_type,
                            content=asset.content, outcome=asset.outcome.value,
                            reason=asset.reason[:500] if asset.reason else None,
                            source_url=asset.source_url)


class SqlAlchemyCertificateRepository(CertificateRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    # ==================== queries ====================

    def _select(self):
        # Asset blobs are only loaded through get_assets
        return select(Certificate).options(
            selectinload(Certificate.assets).options(defer(CertificateAsset.content))
        ).execution_options(populate_existing=True)

    async def _get_model(self, **criteria) -> Certificate:
        stmt = self._select().filter_by(**criteria)
        model = (await self.session.execute(stmt)).scalar_one_or_none()
        if model is None:
            raise CertificateNotFoundError(str(next(iter(criteria.values()))))
        return model

    async def get_by_number(self, certificate_number: str) -> CertificateRecord:
        return to_entity(await self._get_model(certificate_number=certificate_number))

    async def get_by_id(self, certificate_id: int) -> CertificateRecord:
        return to_entity(await self._get_model(id=certificate_id))

    async def list(self, page: int = 1, page_size: int = 20,
                   status: Optional[CertificateStatus] = None) -> Tuple[List[CertificateRecord], int]:
        count_stmt = select(func.count()).select_from(Certificate)
        stmt = self._select()
        if status is not None:
            count_stmt = count_stmt.where(Certificate.status == status)
            stmt = stmt.where(Certificate.status == status)
        total = (await self.session.execute(count_stmt)).scalar_one()
        stmt = stmt.order_by(Certificate.created_at.desc(), Certificate.id.desc()) \
                   .offset((page - 1) * page_size).limit(page_size)
        models = (await self.session.execute(stmt)).scalars().all()
        return [to_entity(m) for m in models], total

    async def get_assets(self, certificate_id: int) -> ResolvedAssets:
        stmt = select(CertificateAsset).where(CertificateAsset.certificate_id == certificate_id)
        rows = (await self.session.execute(stmt)).scalars().all()
        return ResolvedAssets(slots={
            AssetSlot(row.slot): ResolvedAsset(kind=row.kind, content=row.content,
                                               outcome=AssetOutcome(row.outcome),
                                               media_type=row.media_type, reason=row.reason,
                                               source_url=row.source_url)
            for row in rows
        })

    # ==================== commands ====================

    async def _flush_or_duplicate(self, record: CertificateRecord) -> None:
        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            message = str(e.orig)
            for field in _UNIQUE_FIELDS:
                if field in message:
                    if field == "parcel":
                        raise DuplicateError("parcel_id", record.parcel_id)
                    raise DuplicateError(field, getattr(record, field))
            raise

    async def create(self, record: CertificateRecord, assets: ResolvedAssets) -> CertificateRecord:
        model = Certificate(
            certificate_number=record.certificate_number,
            registration_number=record.registration_number,
            status=record.status,
            created_by=record.created_by,
            **_columns(record),
        )
        model.assets = [_asset_row(slot, asset) for slot, asset in assets.slots.items()]
        self.session.add(model)
        await self._flush_or_duplicate(record)
        logger.info(f"Certificate stored: {model.certificate_number} (parcel {model.parcel_id})")
        return to_entity(await self._get_model(id=model.id))

    async def update_status(self, certificate_number: str,
                            new_status: CertificateStatus) -> CertificateRecord:
        current = (await self._get_model(certificate_number=certificate_number)).status
        ensure_transition(current, new_status)

        # Compare-and-set: only succeeds if nobody changed the status meanwhile
        result = await self.session.execute(
            update(Certificate)
            .where(Certificate.certificate_number == certificate_number,
                   Certificate.status == current)
            .values(status=new_status, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise InvalidTransitionError(current.value, new_status.value)
        logger.info(f"Certificate {certificate_number}: {current.value} -> {new_status.value}")
        return to_entity(await self._get_model(certificate_number=certificate_number))

    async def update(self, certificate_id: int, record: CertificateRecord,
                     assets: Optional[ResolvedAssets] = None) -> CertificateRecord:
        model = await self._get_model(id=certificate_id)
        for column, value in _columns(record).items():
            setattr(model, column, value)
        model.updated_at = datetime.utcnow()

        if assets is not None:
            existing = {AssetSlot(row.slot): row for row in model.assets}
            for slot, asset in assets.slots.items():
                row = existing.get(slot)
                if row is None:
                    model.assets.append(_asset_row(slot, asset))
                    continue
                row.kind = asset.kind
                row.media_type = asset.media_type
                row.content = asset.content
                row.outcome = asset.outcome.value
                row.reason = asset.reason[:500] if asset.reason else None
                row.source_url = asset.source_url

        await self._flush_or_duplicate(record)
        return to_entity(await self._get_model(id=certificate_id))

    async def delete(self, certificate_id: int) -> None:
        model = await self._get_model(id=certificate_id)
        await self.session.delete(model)
        await self.session.flush()
        logger.info(f"Certificate deleted: {model.certificate_number}")
