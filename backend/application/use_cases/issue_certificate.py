"""Certificate issuance use case"""
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Callable, Dict, Optional

from loguru import logger

from domain.entities.artifact import Artifact
from domain.entities.asset import AssetSource, ResolvedAssets
from domain.entities.certificate import CertificateRecord
from domain.entities.verification import VerificationPayload
from domain.enums import AssetSlot, CertificateStatus
from domain.exceptions import DuplicateError, GenerationExhaustedError, ValidationError
from domain.identifiers import IdentifierGenerator
from domain.validation import validate_record
from application.ports.asset_resolver import AssetResolverPort
from application.ports.certificate_repository import CertificateRepository
from application.ports.document_composer import DocumentComposerPort
from application.ports.optical_codec import OpticalCodecPort

INITIAL_STATUSES = {CertificateStatus.DRAFT, CertificateStatus.PENDING}
NUMBER_FIELDS = {"certificate_number", "registration_number"}


@dataclass
class IssueCertificateInput:
    record: CertificateRecord  # numbers are assigned here, any given values are ignored
    sources: Dict[AssetSlot, Optional[AssetSource]] = field(default_factory=dict)
    created_by: Optional[int] = None
    status: CertificateStatus = CertificateStatus.PENDING


@dataclass
class IssueCertificateOutput:
    record: CertificateRecord
    artifact: Artifact
    assets: ResolvedAssets
    attempts: int = 1


class IssueCertificateUseCase:
    """Finalized record -> numbers -> assets -> artifact -> registry"""

    def __init__(
        self,
        repository: CertificateRepository,
        generator: IdentifierGenerator,
        resolver: AssetResolverPort,
        codec: OpticalCodecPort,
        composer: DocumentComposerPort,
        max_attempts: int = 5,
        today: Callable[[], date] = date.today,
    ):
        self._repository = repository
        self._generator = generator
        self._resolver = resolver
        self._codec = codec
        self._composer = composer
        self._max_attempts = max_attempts
        self._today = today

    async def execute(self, input: IssueCertificateInput) -> IssueCertificateOutput:
        # 1. Validate the finalized record
        if input.status not in INITIAL_STATUSES:
            raise ValidationError({"status": "a new certificate must start as draft or pending"})
        validate_record(input.record, self._today())

        # 2. Resolve all assets (never fails, degrades to defaults)
        assets = await self._resolver.resolve_all(input.sources)
        for slot, reason in assets.degraded().items():
            if input.sources.get(slot) is not None:
                logger.warning(f"Issuing {input.record.parcel_id} with default {slot.value}: {reason}")

        base = replace(input.record, status=input.status, created_by=input.created_by,
                       id=None, created_at=None, updated_at=None)

        # 3. Assign numbers, compose, persist; retry on number collision only
        for attempt in range(1, self._max_attempts + 1):
            record = base.with_numbers(self._generator.generate_certificate_number(),
                                       self._generator.generate_registration_number())
            artifact = self.compose(record, assets)
            record = replace(record, artifact_sha256=artifact.sha256)
            try:
                stored = await self._repository.create(record, assets)
            except DuplicateError as e:
                if e.field not in NUMBER_FIELDS:
                    raise
                logger.warning(f"Number collision on {e.field} ({e.value}), attempt {attempt}/{self._max_attempts}")
                continue

            logger.info(f"Certificate issued: {stored.certificate_number} for parcel {stored.parcel_id}")
            return IssueCertificateOutput(record=stored, artifact=artifact, assets=assets, attempts=attempt)

        raise GenerationExhaustedError(self._max_attempts)

    def compose(self, record: CertificateRecord, assets: ResolvedAssets) -> Artifact:
        optical_code = self._codec.encode(VerificationPayload.for_record(record))
        return self._composer.compose(record, assets, optical_code)
