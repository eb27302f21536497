"""Certificate registry: uniqueness, lifecycle, assets"""
from dataclasses import replace

import pytest

from domain.entities.asset import ResolvedAsset, ResolvedAssets
from domain.entities.certificate import BilingualText
from domain.enums import AssetOutcome, AssetSlot, CertificateStatus
from domain.exceptions import CertificateNotFoundError, DuplicateError, InvalidTransitionError
from infrastructure.persistence.repositories.certificate_repository import SqlAlchemyCertificateRepository
from tests.factories import default_assets, make_record, png_bytes


@pytest.fixture
def repo(session):
    return SqlAlchemyCertificateRepository(session)


def _numbered(suffix: int, parcel_id: str = "PARCEL-001", **kwargs):
    return make_record(parcel_id=parcel_id, **kwargs).with_numbers(
        f"LRMS-2024-{suffix:06d}", f"REG-2024-{suffix:06d}")


async def test_create_and_read_back(repo, session):
    stored = await repo.create(_numbered(1), default_assets())
    await session.commit()

    assert stored.id is not None
    assert stored.status == CertificateStatus.PENDING
    assert stored.owner.first_name == BilingualText("Abebe", "አበበ")
    assert stored.land.location.block == "B-7"
    assert stored.asset_outcomes[AssetSlot.OWNER_PHOTO] == "fallback-used"

    by_number = await repo.get_by_number("LRMS-2024-000001")
    by_id = await repo.get_by_id(stored.id)
    assert by_number.registration_number == by_id.registration_number == "REG-2024-000001"


async def test_unknown_certificate(repo):
    with pytest.raises(CertificateNotFoundError):
        await repo.get_by_number("LRMS-2099-000000")
    with pytest.raises(CertificateNotFoundError):
        await repo.get_by_id(999)


async def test_duplicate_certificate_number(repo, session):
    await repo.create(_numbered(1), default_assets())
    await session.commit()

    record = _numbered(2, parcel_id="PARCEL-002").with_numbers("LRMS-2024-000001", "REG-2024-000002")
    with pytest.raises(DuplicateError) as info:
        await repo.create(record, default_assets())
    assert info.value.field == "certificate_number"
    assert info.value.value == "LRMS-2024-000001"


async def test_duplicate_registration_number(repo, session):
    await repo.create(_numbered(1), default_assets())
    await session.commit()

    record = _numbered(2, parcel_id="PARCEL-002").with_numbers("LRMS-2024-000002", "REG-2024-000001")
    with pytest.raises(DuplicateError) as info:
        await repo.create(record, default_assets())
    assert info.value.field == "registration_number"


async def test_one_live_certificate_per_parcel(repo, session):
    await repo.create(_numbered(1), default_assets())
    await session.commit()

    with pytest.raises(DuplicateError) as info:
        await repo.create(_numbered(2), default_assets())
    assert info.value.field == "parcel_id"

    # the first certificate survives the failed insert
    assert (await repo.get_by_number("LRMS-2024-000001")).parcel_id == "PARCEL-001"


async def test_revocation_frees_the_parcel(repo, session):
    await repo.create(_numbered(1), default_assets())
    await repo.update_status("LRMS-2024-000001", CertificateStatus.ACTIVE)
    await repo.update_status("LRMS-2024-000001", CertificateStatus.REVOKED)
    await session.commit()

    reissued = await repo.create(_numbered(2), default_assets())
    await session.commit()
    assert reissued.parcel_id == "PARCEL-001"
    assert (await repo.get_by_number("LRMS-2024-000001")).status == CertificateStatus.REVOKED


async def test_status_transitions(repo, session):
    await repo.create(_numbered(1), default_assets())
    await session.commit()

    with pytest.raises(InvalidTransitionError):
        await repo.update_status("LRMS-2024-000001", CertificateStatus.REVOKED)
    with pytest.raises(InvalidTransitionError):
        await repo.update_status("LRMS-2024-000001", CertificateStatus.EXPIRED)

    active = await repo.update_status("LRMS-2024-000001", CertificateStatus.ACTIVE)
    assert active.status == CertificateStatus.ACTIVE
    revoked = await repo.update_status("LRMS-2024-000001", CertificateStatus.REVOKED)
    assert revoked.status == CertificateStatus.REVOKED

    for target in CertificateStatus:
        with pytest.raises(InvalidTransitionError):
            await repo.update_status("LRMS-2024-000001", target)


async def test_list_paging_and_filter(repo, session):
    for n in range(1, 6):
        await repo.create(_numbered(n, parcel_id=f"PARCEL-{n:03d}"), default_assets())
    await repo.update_status("LRMS-2024-000002", CertificateStatus.ACTIVE)
    await session.commit()

    items, total = await repo.list(page=1, page_size=2)
    assert total == 5
    assert len(items) == 2
    # newest first
    assert items[0].certificate_number == "LRMS-2024-000005"

    items, total = await repo.list(page=3, page_size=2)
    assert total == 5
    assert [r.certificate_number for r in items] == ["LRMS-2024-000001"]

    items, total = await repo.list(status=CertificateStatus.ACTIVE)
    assert total == 1
    assert items[0].certificate_number == "LRMS-2024-000002"


async def test_assets_round_trip(repo, session):
    assets = default_assets()
    photo = png_bytes((60, 60), (10, 120, 10))
    assets.slots[AssetSlot.OWNER_PHOTO] = ResolvedAsset(
        kind=AssetSlot.OWNER_PHOTO.kind, content=photo, outcome=AssetOutcome.RESOLVED,
        source_url="https://example.org/abebe.png")
    stored = await repo.create(_numbered(1), assets)
    await session.commit()

    loaded = await repo.get_assets(stored.id)
    assert loaded.is_complete
    assert loaded[AssetSlot.OWNER_PHOTO].content == photo
    assert loaded[AssetSlot.OWNER_PHOTO].outcome == AssetOutcome.RESOLVED
    assert loaded[AssetSlot.OWNER_PHOTO].source_url == "https://example.org/abebe.png"
    assert loaded[AssetSlot.LAND_PHOTO].reason == "no source provided"


async def test_update_replaces_content_and_slots(repo, session):
    stored = await repo.create(_numbered(1), default_assets())
    await session.commit()

    changed = replace(stored, parcel_id="PARCEL-777", artifact_sha256="ab" * 32)
    signature = png_bytes((300, 80), (0, 0, 0))
    replaced = ResolvedAssets(slots={AssetSlot.OFFICER_SIGNATURE: ResolvedAsset(
        kind=AssetSlot.OFFICER_SIGNATURE.kind, content=signature, outcome=AssetOutcome.RESOLVED)})
    updated = await repo.update(stored.id, changed, replaced)
    await session.commit()

    assert updated.parcel_id == "PARCEL-777"
    assert updated.artifact_sha256 == "ab" * 32
    assert updated.asset_outcomes[AssetSlot.OFFICER_SIGNATURE] == "resolved"
    assets = await repo.get_assets(stored.id)
    assert assets[AssetSlot.OFFICER_SIGNATURE].content == signature
    assert assets[AssetSlot.OWNER_SIGNATURE].outcome == AssetOutcome.FALLBACK_USED


async def test_delete(repo, session):
    stored = await repo.create(_numbered(1), default_assets())
    await session.commit()

    await repo.delete(stored.id)
    await session.commit()
    with pytest.raises(CertificateNotFoundError):
        await repo.get_by_id(stored.id)
    assert (await repo.get_assets(stored.id)).slots == {}
