"""Asset resolution pipeline: never raises, tags every fallback"""
import base64
import io

import httpx
import pytest
from PIL import Image

from domain.entities.asset import AssetSource
from domain.enums import AssetKind, AssetOutcome, AssetSlot, RECORD_SLOTS
from infrastructure.assets.defaults import default_asset
from infrastructure.assets.resolver import AssetResolutionPipeline
from tests.factories import SVG_BYTES, png_bytes


def _pipeline(handler=None, **kwargs) -> AssetResolutionPipeline:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler)) if handler else None
    kwargs.setdefault("emblem_url", "")
    return AssetResolutionPipeline(client=client, timeout=2.0, **kwargs)


def _is_png(content: bytes) -> bool:
    with Image.open(io.BytesIO(content)) as image:
        return image.format == "PNG"


def _assert_fallback(result, kind: AssetKind):
    assert result.outcome == AssetOutcome.FALLBACK_USED
    assert result.content == default_asset(kind)
    assert result.reason


# ==================== inline sources ====================

async def test_missing_source_uses_default():
    result = await _pipeline().resolve(None, AssetKind.PROFILE_PHOTO)
    _assert_fallback(result, AssetKind.PROFILE_PHOTO)


async def test_empty_bytes_use_default():
    result = await _pipeline().resolve(AssetSource(data=b"", filename="a.png"), AssetKind.SIGNATURE)
    _assert_fallback(result, AssetKind.SIGNATURE)


async def test_uploaded_png_is_resolved():
    result = await _pipeline().resolve(AssetSource(data=png_bytes(), filename="photo.png"),
                                       AssetKind.PROFILE_PHOTO)
    assert result.outcome == AssetOutcome.RESOLVED
    assert result.reason is None
    assert _is_png(result.content)
    assert result.content != default_asset(AssetKind.PROFILE_PHOTO)


async def test_uploaded_jpeg_is_reencoded_as_png():
    jpeg = png_bytes(fmt="JPEG")
    result = await _pipeline().resolve(AssetSource(data=jpeg, filename="scan.JPG"), AssetKind.LAND_PLAN)
    assert result.outcome == AssetOutcome.RESOLVED
    assert result.media_type == "image/png"
    assert _is_png(result.content)


async def test_bytes_without_filename_are_sniffed():
    result = await _pipeline().resolve(AssetSource(data=png_bytes()), AssetKind.LAND_PLAN)
    assert result.outcome == AssetOutcome.RESOLVED


async def test_svg_is_rasterized():
    result = await _pipeline().resolve(AssetSource(data=SVG_BYTES, filename="plan.svg"), AssetKind.LAND_PLAN)
    assert result.outcome == AssetOutcome.RESOLVED
    assert _is_png(result.content)


async def test_disallowed_extension_falls_back():
    result = await _pipeline().resolve(AssetSource(data=png_bytes(), filename="photo.gif"),
                                       AssetKind.PROFILE_PHOTO)
    _assert_fallback(result, AssetKind.PROFILE_PHOTO)
    assert "gif" in result.reason


async def test_corrupted_image_falls_back():
    result = await _pipeline().resolve(AssetSource(data=b"\x89PNG\r\n\x1a\nnot really", filename="x.png"),
                                       AssetKind.SIGNATURE)
    _assert_fallback(result, AssetKind.SIGNATURE)


async def test_oversized_asset_falls_back():
    result = await _pipeline(max_size=100).resolve(AssetSource(data=png_bytes((400, 400)), filename="big.png"),
                                                   AssetKind.PROFILE_PHOTO)
    _assert_fallback(result, AssetKind.PROFILE_PHOTO)


async def test_large_images_are_downscaled():
    result = await _pipeline(max_dimension=64).resolve(
        AssetSource(data=png_bytes((200, 100)), filename="wide.png"), AssetKind.LAND_PLAN)
    with Image.open(io.BytesIO(result.content)) as image:
        assert image.size == (64, 32)


async def test_data_uri_is_resolved():
    uri = "data:image/png;base64," + base64.b64encode(png_bytes()).decode()
    result = await _pipeline().resolve(AssetSource(data=uri), AssetKind.PROFILE_PHOTO)
    assert result.outcome == AssetOutcome.RESOLVED


@pytest.mark.parametrize("uri", [
    "data:text/plain;base64,aGVsbG8=",
    "data:image/gif;base64," + base64.b64encode(b"GIF89a").decode(),
    "data:image/png;base64,%%%not-base64%%%",
    "data:image/png;base64",
])
async def test_bad_data_uris_fall_back(uri):
    result = await _pipeline().resolve(AssetSource(data=uri), AssetKind.PROFILE_PHOTO)
    _assert_fallback(result, AssetKind.PROFILE_PHOTO)


async def test_unsupported_reference_falls_back():
    result = await _pipeline().resolve(AssetSource(data="/etc/passwd"), AssetKind.PROFILE_PHOTO)
    _assert_fallback(result, AssetKind.PROFILE_PHOTO)


@pytest.mark.parametrize("reference", ["http://[::1/photo.png", "https://files]/x.png"])
async def test_malformed_url_falls_back(reference):
    result = await _pipeline().resolve(AssetSource(data=reference), AssetKind.PROFILE_PHOTO)
    _assert_fallback(result, AssetKind.PROFILE_PHOTO)


async def test_malformed_url_does_not_abort_the_batch():
    assets = await _pipeline().resolve_all({
        AssetSlot.OWNER_PHOTO: AssetSource(data="http://[::1/photo.png"),
        AssetSlot.LAND_PHOTO: AssetSource(data=png_bytes(), filename="land.png"),
    })
    assert assets[AssetSlot.OWNER_PHOTO].outcome == AssetOutcome.FALLBACK_USED
    assert assets[AssetSlot.LAND_PHOTO].outcome == AssetOutcome.RESOLVED


@pytest.mark.parametrize("kind", [AssetKind.PROFILE_PHOTO, AssetKind.SIGNATURE])
async def test_source_equal_to_default_is_tagged_fallback(kind):
    result = await _pipeline().resolve(AssetSource(data=default_asset(kind), filename="same.png"), kind)
    assert result.outcome == AssetOutcome.FALLBACK_USED
    assert result.content == default_asset(kind)
    assert result.reason == "source matches the default image"


# ==================== remote sources ====================

async def test_remote_image_is_fetched():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=png_bytes(), headers={"content-type": "image/png; charset=binary"})

    result = await _pipeline(handler).resolve(AssetSource(data="https://files.example/owner.png"),
                                              AssetKind.PROFILE_PHOTO)
    assert result.outcome == AssetOutcome.RESOLVED
    assert result.source_url == "https://files.example/owner.png"


async def test_remote_svg_by_content_type():
    def handler(request):
        return httpx.Response(200, content=SVG_BYTES, headers={"content-type": "image/svg+xml"})

    result = await _pipeline(handler).resolve(AssetSource(data="https://files.example/plan"), AssetKind.LAND_PLAN)
    assert result.outcome == AssetOutcome.RESOLVED


@pytest.mark.parametrize("response", [
    httpx.Response(404, content=b"missing"),
    httpx.Response(200, content=b"<html></html>", headers={"content-type": "text/html"}),
    httpx.Response(200, content=png_bytes()),
])
async def test_bad_remote_responses_fall_back(response):
    result = await _pipeline(lambda request: response).resolve(
        AssetSource(data="https://files.example/x.png"), AssetKind.SIGNATURE)
    _assert_fallback(result, AssetKind.SIGNATURE)
    assert result.source_url == "https://files.example/x.png"


async def test_timeout_falls_back():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    result = await _pipeline(handler).resolve(AssetSource(data="https://slow.example/x.png"),
                                              AssetKind.PROFILE_PHOTO)
    _assert_fallback(result, AssetKind.PROFILE_PHOTO)
    assert "timed out" in result.reason


async def test_connection_error_falls_back():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    result = await _pipeline(handler).resolve(AssetSource(data="http://down.example/x.png"),
                                              AssetKind.LAND_PLAN)
    _assert_fallback(result, AssetKind.LAND_PLAN)


async def test_oversized_remote_body_is_rejected_by_length():
    def handler(request):
        return httpx.Response(200, content=png_bytes((400, 400)), headers={"content-type": "image/png"})

    result = await _pipeline(handler, max_size=100).resolve(AssetSource(data="https://files.example/big.png"),
                                                            AssetKind.LAND_PLAN)
    _assert_fallback(result, AssetKind.LAND_PLAN)
    assert "exceeds 100 bytes" in result.reason


async def test_oversized_streamed_body_stops_early():
    sent = []

    async def body():
        for _ in range(50):
            sent.append(1024)
            yield b"\0" * 1024

    def handler(request):
        return httpx.Response(200, content=body(), headers={"content-type": "image/png"})

    result = await _pipeline(handler, max_size=4096).resolve(AssetSource(data="https://files.example/stream.png"),
                                                             AssetKind.LAND_PLAN)
    _assert_fallback(result, AssetKind.LAND_PLAN)
    assert "exceeds 4096 bytes" in result.reason
    assert len(sent) < 50


# ==================== batch ====================

async def test_resolve_all_covers_every_slot_and_emblem():
    def handler(request):
        return httpx.Response(200, content=png_bytes((30, 20), (0, 0, 255)), headers={"content-type": "image/png"})

    pipeline = _pipeline(handler, emblem_url="https://flags.example/et.png")
    assets = await pipeline.resolve_all({
        AssetSlot.OWNER_PHOTO: AssetSource(data=png_bytes(), filename="owner.png"),
        AssetSlot.OWNER_SIGNATURE: AssetSource(data=b"garbage", filename="sig.png"),
    })

    assert assets.is_complete
    assert set(assets.slots) == set(RECORD_SLOTS) | {AssetSlot.EMBLEM}
    assert assets[AssetSlot.OWNER_PHOTO].outcome == AssetOutcome.RESOLVED
    assert assets.emblem.outcome == AssetOutcome.RESOLVED
    assert assets[AssetSlot.OWNER_SIGNATURE].outcome == AssetOutcome.FALLBACK_USED
    assert assets[AssetSlot.LAND_PHOTO].outcome == AssetOutcome.FALLBACK_USED
    assert set(assets.degraded()) == set(RECORD_SLOTS) - {AssetSlot.OWNER_PHOTO}


async def test_emblem_without_url_uses_default():
    assets = await _pipeline().resolve_all({})
    _assert_fallback(assets.emblem, AssetKind.EMBLEM)


def test_defaults_are_stable_png():
    for kind in AssetKind:
        assert _is_png(default_asset(kind))
        assert default_asset(kind) is default_asset(kind)
