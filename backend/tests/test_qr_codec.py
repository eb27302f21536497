"""Verification payload codec"""
import json
import random
from datetime import date

import pytest

from domain.entities.verification import VerificationPayload
from domain.exceptions import DecodeFailedError
from infrastructure.codec.qr_codec import QrCodec, verification_url
from tests.factories import png_bytes

PAYLOAD = VerificationPayload(certificate_number="LRMS-2024-004211",
                              owner_display_name="Abebe Kebede",
                              issued_date=date(2024, 3, 1))


@pytest.fixture
def codec():
    return QrCodec()


def test_encoding_is_deterministic(codec):
    assert codec.encode(PAYLOAD) == codec.encode(PAYLOAD)


def test_serialized_payload(codec):
    assert codec.serialize(PAYLOAD) == (
        '{"certificateNumber":"LRMS-2024-004211","ownerName":"Abebe Kebede","issueDate":"2024-03-01"}'
    )


def test_decodes_its_own_output(codec):
    raw = codec.decode(codec.encode(PAYLOAD))
    assert json.loads(raw) == PAYLOAD.to_wire()
    assert codec.extract_lookup_key(raw) == "LRMS-2024-004211"


def _random_payloads(count, seed=2024):
    rng = random.Random(seed)
    names = ["Abebe Kebede", "Tigist Alemu", "Mulugeta Haile", "Hanna Girma", "Dawit Bekele"]
    for _ in range(count):
        yield VerificationPayload(
            certificate_number=f"LRMS-{rng.randint(2020, 2030)}-{rng.randrange(1_000_000):06d}",
            owner_display_name=rng.choice(names),
            issued_date=date(rng.randint(2020, 2030), rng.randint(1, 12), rng.randint(1, 28)),
        )


def test_decodes_every_issued_number(codec):
    for payload in _random_payloads(200):
        raw = codec.decode(codec.encode(payload))
        assert raw == codec.serialize(payload), payload.certificate_number
        assert codec.extract_lookup_key(raw) == payload.certificate_number


def test_decode_rejects_image_without_code(codec):
    with pytest.raises(DecodeFailedError):
        codec.decode(png_bytes((200, 200), (255, 255, 255)))


@pytest.mark.parametrize("data", [b"", b"not an image at all"])
def test_decode_rejects_unreadable_input(codec, data):
    with pytest.raises(DecodeFailedError):
        codec.decode(data)


@pytest.mark.parametrize("raw, expected", [
    ('{"certificateNumber":"LRMS-2024-004211","ownerName":"x","issueDate":"2024-03-01"}', "LRMS-2024-004211"),
    ('{"certificateNumber":" LRMS-2024-004211 "}', "LRMS-2024-004211"),
    ("https://lrms.gov.et/verify-certificate/LRMS-2024-004211", "LRMS-2024-004211"),
    ("https://lrms.gov.et/verify/LRMS-2024-004211/?src=qr", "LRMS-2024-004211"),
    ("  LRMS-2024-004211\n", "LRMS-2024-004211"),
    ("{broken json", "{broken json"),
    ("http://[::1/LRMS-2024-004211", "http://[::1/LRMS-2024-004211"),
])
def test_extract_lookup_key(codec, raw, expected):
    assert codec.extract_lookup_key(raw) == expected


def test_advisory_fields_are_not_trusted(codec):
    # Owner and date in the payload are ignored, only the number is used for lookup
    raw = '{"certificateNumber":"LRMS-2024-004211","ownerName":"Someone Else","issueDate":"1900-01-01"}'
    assert codec.extract_lookup_key(raw) == "LRMS-2024-004211"


def test_verification_url():
    assert verification_url("LRMS-2024-004211") == "https://lrms.gov.et/verify-certificate/LRMS-2024-004211"
