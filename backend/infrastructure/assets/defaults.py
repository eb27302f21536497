"""
Default placeholder images per asset kind

Drawn with Pillow once and cached, so every fallback of a kind is the same
bytes. The resolver compares against these bytes to tag fallback outcomes.
"""
import io
from functools import lru_cache

from PIL import Image, ImageDraw

from domain.enums import AssetKind


def _to_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG", optimize=False)
    return buffer.getvalue()


def _profile_photo() -> Image.Image:
    # Grey silhouette on a light background, portrait 100:120
    image = Image.new("RGB", (200, 240), (236, 236, 236))
    draw = ImageDraw.Draw(image)
    draw.ellipse((65, 40, 135, 110), fill=(170, 170, 170))
    draw.pieslice((30, 120, 170, 300), start=180, end=360, fill=(170, 170, 170))
    draw.rectangle((0, 0, 199, 239), outline=(200, 200, 200), width=2)
    return image


def _signature() -> Image.Image:
    # Transparent strip; the composer draws a signing line instead
    return Image.new("RGBA", (300, 80), (255, 255, 255, 0))


def _land_plan() -> Image.Image:
    image = Image.new("RGB", (320, 240), (250, 250, 245))
    draw = ImageDraw.Draw(image)
    for x in range(0, 320, 20):
        draw.line((x, 0, x, 239), fill=(220, 220, 210))
    for y in range(0, 240, 20):
        draw.line((0, y, 319, y), fill=(220, 220, 210))
    draw.polygon([(60, 60), (250, 50), (270, 180), (80, 200)], outline=(0, 100, 0), width=3)
    return image


def _emblem() -> Image.Image:
    # Green / yellow / red bands with a blue disc
    image = Image.new("RGB", (360, 240), (255, 255, 255))
    draw = ImageDraw.Draw(image)
    draw.rectangle((0, 0, 359, 79), fill=(7, 137, 48))
    draw.rectangle((0, 80, 359, 159), fill=(252, 221, 9))
    draw.rectangle((0, 160, 359, 239), fill=(218, 18, 26))
    draw.ellipse((130, 70, 230, 170), fill=(15, 71, 175))
    return image


_DRAWERS = {
    AssetKind.PROFILE_PHOTO: _profile_photo,
    AssetKind.SIGNATURE: _signature,
    AssetKind.LAND_PLAN: _land_plan,
    AssetKind.EMBLEM: _emblem,
}


@lru_cache(maxsize=None)
def default_asset(kind: AssetKind) -> bytes:
    """Canonical PNG placeholder for an asset kind"""
    return _to_png(_DRAWERS[AssetKind(kind)]())


def is_default(kind: AssetKind, content: bytes) -> bool:
    return content == default_asset(kind)
