"""
Verification payload codec (QR)

encode: payload -> PNG with a QR code (error correction level H)
decode: image bytes -> raw decoded text (OpenCV QR detectors)
"""
import io
import json
import re
from typing import Iterator, Optional
from urllib.parse import urlparse

import cv2
import numpy as np
import qrcode
from loguru import logger
from qrcode.constants import ERROR_CORRECT_H

from config import settings
from application.ports.optical_codec import OpticalCodecPort
from domain.entities.verification import VerificationPayload
from domain.exceptions import DecodeFailedError

_NUMBER_IN_TEXT = re.compile(r'([A-Z]+-\d{4}-\d{6})')

# Quiet zone added around scans that were cropped tight to the code
_DECODE_PADDING = 40
_DECODE_SCALES = (0.5, 0.25, 2.0)
_MIN_DECODE_SIDE = 120
_MASK_PATTERNS = range(8)


class QrCodec(OpticalCodecPort):

    def __init__(self, box_size: Optional[int] = None, border: Optional[int] = None):
        self.box_size = box_size or settings.QR_BOX_SIZE
        self.border = settings.QR_BORDER if border is None else border

    def serialize(self, payload: VerificationPayload) -> str:
        return json.dumps(payload.to_wire(), ensure_ascii=False, separators=(",", ":"))

    def encode(self, payload: VerificationPayload) -> bytes:
        """
        The mask pattern qrcode would pick is kept unless our own decoder
        cannot read the result back; then the first readable mask is used.
        Same payload, same PNG.
        """
        text = self.serialize(payload)
        preferred = self._render(text)
        if self._reads_back(preferred, text):
            return preferred
        for mask in _MASK_PATTERNS:
            candidate = self._render(text, mask)
            if self._reads_back(candidate, text):
                logger.debug(f"QR for {payload.certificate_number} rendered with mask pattern {mask}")
                return candidate
        logger.warning(f"QR for {payload.certificate_number} could not be read back with any mask pattern")
        return preferred

    def decode(self, image: bytes) -> str:
        if not image:
            raise DecodeFailedError("empty image")
        buffer = np.frombuffer(image, dtype=np.uint8)
        try:
            gray = cv2.imdecode(buffer, cv2.IMREAD_GRAYSCALE)
        except cv2.error as e:
            raise DecodeFailedError(str(e))
        if gray is None:
            raise DecodeFailedError("image could not be decoded")

        detectors = (cv2.QRCodeDetector(), cv2.QRCodeDetectorAruco())
        for frame in _decode_variants(gray):
            for detector in detectors:
                try:
                    text, _points, _ = detector.detectAndDecode(frame)
                except cv2.error:
                    continue
                if text:
                    return text
        raise DecodeFailedError()

    # ==================== internals ====================

    def _render(self, text: str, mask_pattern: Optional[int] = None) -> bytes:
        qr = qrcode.QRCode(
            version=None,
            error_correction=ERROR_CORRECT_H,
            box_size=self.box_size,
            border=self.border,
            mask_pattern=mask_pattern,
        )
        qr.add_data(text)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        return buffer.getvalue()

    def _reads_back(self, image: bytes, text: str) -> bool:
        try:
            return self.decode(image) == text
        except DecodeFailedError:
            return False

    def extract_lookup_key(self, raw: str) -> str:
        """
        Certificate number from a scanned payload, a verification link or
        manual entry. The advisory owner/date fields are never trusted.
        """
        text = (raw or "").strip()
        if text.startswith("{"):
            try:
                data = json.loads(text)
            except ValueError:
                data = None
            if isinstance(data, dict) and isinstance(data.get("certificateNumber"), str):
                return data["certificateNumber"].strip()
        if "/" in text:
            try:
                tail = urlparse(text).path.rstrip("/").rsplit("/", 1)[-1]
            except ValueError:
                return text
            match = _NUMBER_IN_TEXT.fullmatch(tail)
            if match:
                return match.group(1)
        return text


def verification_url(certificate_number: str) -> str:
    return f"{settings.VERIFICATION_BASE_URL.rstrip('/')}/{certificate_number}"


def _decode_variants(gray: np.ndarray) -> Iterator[np.ndarray]:
    """The scan as given, padded, rescaled and binarized"""
    yield gray
    padded = cv2.copyMakeBorder(gray, _DECODE_PADDING, _DECODE_PADDING, _DECODE_PADDING, _DECODE_PADDING,
                                cv2.BORDER_CONSTANT, value=255)
    yield padded
    for scale in _DECODE_SCALES:
        if min(padded.shape[:2]) * scale < _MIN_DECODE_SIDE:
            continue
        interpolation = cv2.INTER_AREA if scale < 1 else cv2.INTER_NEAREST
        yield cv2.resize(padded, None, fx=scale, fy=scale, interpolation=interpolation)
    _, binary = cv2.threshold(padded, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    yield binary
