"""Public verification: authoritative, redacted, never errors"""
from datetime import date

import pytest

from application.use_cases.verify_certificate import VerifyCertificateUseCase
from domain.entities.verification import VerificationPayload
from domain.enums import CertificateStatus, VerificationStatus
from domain.exceptions import DecodeFailedError
from infrastructure.codec.qr_codec import QrCodec, verification_url
from infrastructure.persistence.repositories.certificate_repository import SqlAlchemyCertificateRepository
from tests.factories import default_assets, make_record, png_bytes

NUMBER = "LRMS-2024-004211"


@pytest.fixture
def repo(session):
    return SqlAlchemyCertificateRepository(session)


@pytest.fixture
async def stored(repo, session):
    record = make_record(expires=date(2024, 12, 31)).with_numbers(NUMBER, "REG-2024-118822")
    stored = await repo.create(record, default_assets())
    await session.commit()
    return stored


def _verifier(repo, today=date(2024, 6, 1)):
    return VerifyCertificateUseCase(repo, QrCodec(), today=lambda: today)


async def test_unknown_number_is_not_found(repo, db):
    result = await _verifier(repo).execute("LRMS-2099-000000")
    assert result.found is False
    assert result.status == VerificationStatus.NOT_FOUND
    assert result.record is None


@pytest.mark.parametrize("query", ["", "   ", "hello", "LRMS-24-1", "{\"certificateNumber\": 7}", "{broken"])
async def test_malformed_input_is_not_found(repo, db, query):
    result = await _verifier(repo).execute(query)
    assert result.found is False
    assert result.status == VerificationStatus.NOT_FOUND


async def test_pending_certificate(repo, stored):
    result = await _verifier(repo).execute(NUMBER)
    assert result.found is True
    assert result.status == VerificationStatus.PENDING
    assert result.record.certificate_number == NUMBER


async def test_lookup_from_payload_and_link(repo, stored):
    codec = QrCodec()
    payload = codec.serialize(VerificationPayload.for_record(stored))
    for query in (payload, verification_url(NUMBER), f"  {NUMBER}  "):
        result = await _verifier(repo).execute(query)
        assert result.found is True
        assert result.record.certificate_number == NUMBER


async def test_expiry_is_derived_not_stored(repo, session, stored):
    await repo.update_status(NUMBER, CertificateStatus.ACTIVE)
    await session.commit()

    assert (await _verifier(repo, today=date(2024, 12, 31)).execute(NUMBER)).status == VerificationStatus.ACTIVE
    assert (await _verifier(repo, today=date(2025, 1, 1)).execute(NUMBER)).status == VerificationStatus.EXPIRED
    assert (await repo.get_by_number(NUMBER)).status == CertificateStatus.ACTIVE


async def test_revoked_stays_revoked_after_expiry(repo, session, stored):
    await repo.update_status(NUMBER, CertificateStatus.ACTIVE)
    await repo.update_status(NUMBER, CertificateStatus.REVOKED)
    await session.commit()

    result = await _verifier(repo, today=date(2030, 1, 1)).execute(NUMBER)
    assert result.found is True
    assert result.status == VerificationStatus.REVOKED


async def test_verification_is_idempotent(repo, stored):
    verifier = _verifier(repo)
    assert await verifier.execute(NUMBER) == await verifier.execute(NUMBER)


async def test_public_view_is_redacted(repo, stored):
    view = (await _verifier(repo).execute(NUMBER)).record
    assert view.national_id_masked == "ET********89"
    assert view.owner_name == "Abebe Kebede"
    assert view.owner_name_local == "አበበ ከበደ"
    assert not hasattr(view, "phone")
    assert not hasattr(view, "date_of_birth")
    assert "0911223344" not in repr(view)


async def test_scan_reads_the_printed_code(repo, stored):
    image = QrCodec().encode(VerificationPayload.for_record(stored))
    result = await _verifier(repo).execute_scan(image)
    assert result.found is True
    assert result.record.certificate_number == NUMBER


async def test_scan_of_unreadable_image_raises(repo, db):
    with pytest.raises(DecodeFailedError):
        await _verifier(repo).execute_scan(png_bytes((200, 200), (255, 255, 255)))
    with pytest.raises(DecodeFailedError):
        await _verifier(repo).execute_scan(b"not an image")
