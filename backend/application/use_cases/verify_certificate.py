"""Certificate verification use case (public, read-only)"""
from datetime import date
from typing import Callable

from loguru import logger

from domain.entities.verification import PublicCertificateView, VerificationResult
from domain.enums import VerificationStatus
from domain.exceptions import CertificateNotFoundError
from domain.identifiers import is_valid_number
from application.ports.certificate_repository import CertificateRepository
from application.ports.optical_codec import OpticalCodecPort


class VerifyCertificateUseCase:
    """
    Resolves a certificate number (typed, or recovered from a scanned code)
    to its authoritative status. Never errors: anything that is not a known
    certificate is reported as not_found, without saying why.
    """

    def __init__(self, repository: CertificateRepository, codec: OpticalCodecPort,
                 today: Callable[[], date] = date.today):
        self._repository = repository
        self._codec = codec
        self._today = today

    async def execute(self, query: str) -> VerificationResult:
        try:
            # 1. Lookup key from a payload, a link or manual entry
            number = self._codec.extract_lookup_key(query)

            # 2. Format check before touching the registry
            if not is_valid_number(number):
                return VerificationResult.not_found()

            # 3. Authoritative lookup
            record = await self._repository.get_by_number(number)
        except CertificateNotFoundError:
            return VerificationResult.not_found()
        except Exception:
            logger.exception("Verification lookup failed")
            return VerificationResult.not_found()

        # 4. Expiry is derived at read time, the stored status is untouched
        status = record.effective_status(self._today())
        return VerificationResult(found=True, status=VerificationStatus(status.value),
                                  record=PublicCertificateView.from_record(record))

    async def execute_scan(self, image: bytes) -> VerificationResult:
        """Decode a scanned code image; DecodeFailedError propagates so the client can rescan"""
        raw = self._codec.decode(image)
        return await self.execute(raw)
