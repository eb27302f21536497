"""
Asset resolution pipeline

Turns uploaded bytes, data URIs and remote URLs into canonical PNG images
that the composer can embed. A missing or bad asset never aborts issuance:
it degrades to the default for its kind and the reason is recorded.
"""
import asyncio
import base64
import binascii
import io
from typing import Mapping, Optional, Tuple
from urllib.parse import unquote_to_bytes, urlparse

import fitz  # PyMuPDF
import httpx
from PIL import Image
from loguru import logger

from config import settings
from application.ports.asset_resolver import AssetResolverPort
from domain.entities.asset import AssetSource, ResolvedAsset, ResolvedAssets
from domain.enums import AssetKind, AssetOutcome, AssetSlot, RECORD_SLOTS
from domain.exceptions import AssetResolutionDegraded
from infrastructure.assets.defaults import default_asset

# Pillow format name -> extension on the allow-list
_SNIFFED_EXTENSIONS = {"PNG": "png", "JPEG": "jpg"}


class AssetResolutionPipeline(AssetResolverPort):
    """Resolves asset sources to embeddable PNG bytes, never raising"""

    def __init__(self, client: Optional[httpx.AsyncClient] = None,
                 timeout: Optional[float] = None,
                 max_size: Optional[int] = None,
                 max_dimension: Optional[int] = None,
                 emblem_url: Optional[str] = None):
        self._client = client
        self.timeout = timeout if timeout is not None else settings.ASSET_FETCH_TIMEOUT
        self.max_size = max_size if max_size is not None else settings.MAX_ASSET_SIZE
        self.max_dimension = max_dimension or settings.ASSET_MAX_DIMENSION
        self.emblem_url = settings.EMBLEM_URL if emblem_url is None else emblem_url
        self.allowed_extensions = {ext.lower() for ext in settings.ALLOWED_IMAGE_EXTENSIONS}
        self.allowed_mime_types = {mime.lower() for mime in settings.ALLOWED_IMAGE_MIME_TYPES}

    # ==================== public API ====================

    async def resolve(self, source: Optional[AssetSource], kind: AssetKind) -> ResolvedAsset:
        if self._client is not None:
            return await self._resolve(source, kind, self._client, kind.value)
        async with self._new_client() as client:
            return await self._resolve(source, kind, client, kind.value)

    async def resolve_all(self, sources: Mapping[AssetSlot, Optional[AssetSource]]) -> ResolvedAssets:
        """Resolve all six record slots plus the jurisdiction emblem concurrently"""
        wanted = {slot: sources.get(slot) for slot in RECORD_SLOTS}
        wanted[AssetSlot.EMBLEM] = AssetSource(data=self.emblem_url) if self.emblem_url else None
        return await self.resolve_slots(wanted)

    async def resolve_slots(self, sources: Mapping[AssetSlot, Optional[AssetSource]]) -> ResolvedAssets:
        """Resolve only the given slots (used when an edit replaces some assets)"""
        if self._client is not None:
            return await self._gather(sources, self._client)
        async with self._new_client() as client:
            return await self._gather(sources, client)

    # ==================== internals ====================

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)

    async def _gather(self, sources: Mapping[AssetSlot, Optional[AssetSource]],
                      client: httpx.AsyncClient) -> ResolvedAssets:
        slots = list(sources)
        results = await asyncio.gather(*[
            self._resolve(sources[slot], slot.kind, client, slot.value) for slot in slots
        ])
        return ResolvedAssets(slots=dict(zip(slots, results)))

    async def _resolve(self, source: Optional[AssetSource], kind: AssetKind,
                       client: httpx.AsyncClient, label: str) -> ResolvedAsset:
        source_url = None
        if source is not None and isinstance(source.data, str) and _is_remote(source.data):
            source_url = source.data

        try:
            if source is None or source.is_empty:
                raise AssetResolutionDegraded("no source provided")
            raw, extension = await self._load(source, client)
            content = await asyncio.to_thread(self._normalize, raw, extension)
        except AssetResolutionDegraded as e:
            return self._fallback(kind, str(e), label, source_url)
        except Exception as e:
            return self._fallback(kind, f"{type(e).__name__}: {e}", label, source_url)

        if content == default_asset(kind):
            return ResolvedAsset(kind=kind, content=content, outcome=AssetOutcome.FALLBACK_USED,
                                 reason="source matches the default image", source_url=source_url)
        return ResolvedAsset(kind=kind, content=content, outcome=AssetOutcome.RESOLVED,
                             source_url=source_url)

    def _fallback(self, kind: AssetKind, reason: str, label: str,
                  source_url: Optional[str]) -> ResolvedAsset:
        if reason != "no source provided":
            logger.warning(f"Asset '{label}' fell back to the default {kind.value}: {reason}")
        return ResolvedAsset(kind=kind, content=default_asset(kind),
                             outcome=AssetOutcome.FALLBACK_USED, reason=reason,
                             source_url=source_url)

    async def _load(self, source: AssetSource, client: httpx.AsyncClient) -> Tuple[bytes, str]:
        """Return the raw bytes and the declared extension of a source"""
        data = source.data
        if isinstance(data, (bytes, bytearray)):
            raw = bytes(data)
            extension = _suffix(source.filename) if source.filename else _sniff(raw)
        elif data.startswith("data:"):
            raw, extension = _parse_data_uri(data)
        elif _is_remote(data):
            raw, extension = await self._fetch(data, client)
        else:
            raise AssetResolutionDegraded("unsupported source reference")

        if extension not in self.allowed_extensions:
            raise AssetResolutionDegraded(f"file type '{extension or 'unknown'}' is not allowed")
        if len(raw) > self.max_size:
            raise AssetResolutionDegraded(f"asset exceeds {self.max_size} bytes")
        return raw, extension

    async def _fetch(self, url: str, client: httpx.AsyncClient) -> Tuple[bytes, str]:
        try:
            return await asyncio.wait_for(self._download(url, client), timeout=self.timeout)
        except (httpx.TimeoutException, asyncio.TimeoutError):
            raise AssetResolutionDegraded(f"fetch timed out after {self.timeout}s")
        except httpx.HTTPError as e:
            raise AssetResolutionDegraded(f"fetch failed: {e}")

    async def _download(self, url: str, client: httpx.AsyncClient) -> Tuple[bytes, str]:
        """Stream the body, stopping as soon as it passes the size cap"""
        async with client.stream("GET", url) as response:
            if not response.is_success:
                raise AssetResolutionDegraded(f"fetch returned HTTP {response.status_code}")
            content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
            if content_type not in self.allowed_mime_types:
                raise AssetResolutionDegraded(f"content type '{content_type or 'missing'}' is not allowed")

            declared = response.headers.get("content-length", "")
            if declared.isdigit() and int(declared) > self.max_size:
                raise AssetResolutionDegraded(f"asset exceeds {self.max_size} bytes")

            chunks = []
            received = 0
            async for chunk in response.aiter_bytes():
                received += len(chunk)
                if received > self.max_size:
                    raise AssetResolutionDegraded(f"asset exceeds {self.max_size} bytes")
                chunks.append(chunk)
        return b"".join(chunks), _mime_extension(content_type)

    def _normalize(self, raw: bytes, extension: str) -> bytes:
        """Decode, downscale and re-encode as PNG. Runs in a worker thread."""
        if extension == "svg":
            raw = _rasterize_svg(raw)
        with Image.open(io.BytesIO(raw)) as image:
            image.load()
            has_alpha = image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info
            image = image.convert("RGBA" if has_alpha else "RGB")
            image.thumbnail((self.max_dimension, self.max_dimension))
            buffer = io.BytesIO()
            image.save(buffer, format="PNG")
            return buffer.getvalue()


def _is_remote(value: str) -> bool:
    try:
        return urlparse(value).scheme in ("http", "https")
    except ValueError:
        return False


def _suffix(filename: str) -> str:
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


def _mime_extension(media_type: str) -> str:
    subtype = media_type.split("/", 1)[-1].lower()
    if subtype == "svg+xml":
        return "svg"
    return subtype


def _sniff(raw: bytes) -> str:
    head = raw[:512].lstrip()
    if head.startswith(b"<svg") or (head.startswith(b"<?xml") and b"<svg" in raw[:4096]):
        return "svg"
    try:
        with Image.open(io.BytesIO(raw)) as image:
            return _SNIFFED_EXTENSIONS.get(image.format, (image.format or "").lower())
    except Exception:
        raise AssetResolutionDegraded("unrecognized image data")


def _parse_data_uri(uri: str) -> Tuple[bytes, str]:
    header, sep, payload = uri.partition(",")
    if not sep:
        raise AssetResolutionDegraded("malformed data URI")
    params = header[len("data:"):].split(";")
    media_type = params[0].lower()
    if not media_type.startswith("image/"):
        raise AssetResolutionDegraded(f"data URI type '{media_type or 'missing'}' is not an image")
    if "base64" in params[1:]:
        try:
            raw = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError):
            raise AssetResolutionDegraded("invalid base64 payload")
    else:
        raw = unquote_to_bytes(payload)
    return raw, _mime_extension(media_type)


def _rasterize_svg(raw: bytes) -> bytes:
    with fitz.open(stream=raw, filetype="svg") as doc:
        if doc.page_count < 1:
            raise AssetResolutionDegraded("empty SVG document")
        return doc[0].get_pixmap(alpha=True).tobytes("png")
