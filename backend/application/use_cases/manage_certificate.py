"""Certificate listing, edit, status change and delete use cases"""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

from domain.entities.asset import AssetSource, ResolvedAssets
from domain.entities.certificate import CertificateRecord, ensure_transition
from domain.entities.user import UserEntity
from domain.entities.verification import VerificationPayload
from domain.enums import AssetSlot, CertificateStatus
from domain.exceptions import PermissionDeniedError
from domain.validation import apply_changes, validate_record
from application.ports.asset_resolver import AssetResolverPort
from application.ports.certificate_repository import CertificateRepository
from application.ports.document_composer import DocumentComposerPort
from application.ports.optical_codec import OpticalCodecPort


# ==================== list / fetch ====================

@dataclass
class CertificatePage:
    items: List[CertificateRecord]
    total: int
    page: int
    page_size: int


class ListCertificatesUseCase:
    def __init__(self, repository: CertificateRepository):
        self._repository = repository

    async def execute(self, page: int = 1, page_size: int = 20,
                      status: Optional[CertificateStatus] = None) -> CertificatePage:
        items, total = await self._repository.list(page=page, page_size=page_size, status=status)
        return CertificatePage(items=items, total=total, page=page, page_size=page_size)


# ==================== status ====================

class ChangeStatusUseCase:
    """Moves a certificate along draft -> pending -> active -> revoked"""

    def __init__(self, repository: CertificateRepository):
        self._repository = repository

    async def execute(self, certificate_number: str, target: CertificateStatus,
                      actor: Optional[UserEntity] = None) -> CertificateRecord:
        if target == CertificateStatus.REVOKED and actor is not None and not actor.is_admin:
            raise PermissionDeniedError("revoke a certificate")
        record = await self._repository.get_by_number(certificate_number)
        ensure_transition(record.status, target)
        return await self._repository.update_status(certificate_number, target)


# ==================== edit ====================

@dataclass
class UpdateCertificateInput:
    certificate_id: int
    changes: Dict[str, Any] = field(default_factory=dict)
    sources: Dict[AssetSlot, Optional[AssetSource]] = field(default_factory=dict)
    status: Optional[CertificateStatus] = None
    actor: Optional[UserEntity] = None


class UpdateCertificateUseCase:
    """Edits content while draft/pending, then applies an optional status change"""

    def __init__(
        self,
        repository: CertificateRepository,
        resolver: AssetResolverPort,
        codec: OpticalCodecPort,
        composer: DocumentComposerPort,
        today: Callable[[], date] = date.today,
    ):
        self._repository = repository
        self._resolver = resolver
        self._codec = codec
        self._composer = composer
        self._today = today
        self._status = ChangeStatusUseCase(repository)

    async def execute(self, input: UpdateCertificateInput) -> CertificateRecord:
        record = await self._repository.get_by_id(input.certificate_id)

        if input.changes or input.sources:
            # 1. Issued certificates are audit facts
            record.ensure_editable()

            # 2. Merge and re-validate
            updated = apply_changes(record, input.changes)
            validate_record(updated, self._today())

            # 3. Resolve replaced assets, keep the rest as stored
            replaced = ResolvedAssets()
            if input.sources:
                replaced = await self._resolver.resolve_slots(input.sources)
            assets = await self._repository.get_assets(record.id)
            assets.slots.update(replaced.slots)

            # 4. Re-compose so the stored digest matches the new content
            optical_code = self._codec.encode(VerificationPayload.for_record(updated))
            artifact = self._composer.compose(updated, assets, optical_code)
            updated.artifact_sha256 = artifact.sha256

            record = await self._repository.update(record.id, updated, replaced if input.sources else None)
            logger.info(f"Certificate edited: {record.certificate_number}")

        if input.status is not None and input.status != record.status:
            record = await self._status.execute(record.certificate_number, input.status, input.actor)
        return record


# ==================== delete ====================

class DeleteCertificateUseCase:
    def __init__(self, repository: CertificateRepository):
        self._repository = repository

    async def execute(self, certificate_id: int) -> None:
        record = await self._repository.get_by_id(certificate_id)
        record.ensure_editable()
        await self._repository.delete(certificate_id)
