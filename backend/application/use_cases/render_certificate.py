"""Re-render a stored certificate from its persisted record and assets"""
from dataclasses import dataclass

from domain.entities.certificate import CertificateRecord
from domain.entities.verification import VerificationPayload
from application.ports.certificate_repository import CertificateRepository
from application.ports.document_composer import DocumentComposerPort
from application.ports.optical_codec import OpticalCodecPort

EXPORT_FORMATS = {"pdf": "application/pdf", "png": "image/png"}


@dataclass
class RenderedCertificate:
    certificate_number: str
    content: bytes
    media_type: str
    filename: str
    sha256: str  # digest of the PDF the export was taken from


class RenderCertificateUseCase:
    """Stored assets are reused as-is; nothing is fetched again"""

    def __init__(self, repository: CertificateRepository, codec: OpticalCodecPort,
                 composer: DocumentComposerPort, raster_dpi: int = 150):
        self._repository = repository
        self._codec = codec
        self._composer = composer
        self._raster_dpi = raster_dpi

    async def execute(self, certificate_number: str, format: str = "pdf") -> RenderedCertificate:
        record = await self._repository.get_by_number(certificate_number)
        return await self._render(record, format)

    async def execute_by_id(self, certificate_id: int, format: str = "pdf") -> RenderedCertificate:
        record = await self._repository.get_by_id(certificate_id)
        return await self._render(record, format)

    async def _render(self, record: CertificateRecord, format: str) -> RenderedCertificate:
        if format not in EXPORT_FORMATS:
            raise ValueError(f"Unsupported export format: {format}")

        assets = await self._repository.get_assets(record.id)
        optical_code = self._codec.encode(VerificationPayload.for_record(record))
        artifact = self._composer.compose(record, assets, optical_code)

        if format == "png":
            content = self._composer.rasterize(artifact, dpi=self._raster_dpi)
            filename = artifact.filename[:-len(".pdf")] + ".png"
        else:
            content, filename = artifact.pdf, artifact.filename
        return RenderedCertificate(certificate_number=record.certificate_number, content=content,
                                   media_type=EXPORT_FORMATS[format], filename=filename,
                                   sha256=artifact.sha256)
