"""
Certificate document composer (PyMuPDF)

Lays out one landscape A4 page from a certificate record, its resolved
assets and the verification code image. Identical inputs give identical
PDF bytes: no wall-clock values, metadata derived from the record, and no
random trailer /ID.
"""
import html
import os
from datetime import date
from typing import List, Optional, Tuple

import fitz  # PyMuPDF

from config import settings
from application.ports.document_composer import DocumentComposerPort
from domain.entities.artifact import Artifact
from domain.entities.asset import ResolvedAsset, ResolvedAssets
from domain.entities.certificate import BilingualText, CertificateRecord
from domain.enums import AssetSlot
from infrastructure.codec.qr_codec import verification_url
from infrastructure.rendering.formatting import (
    format_date, format_land_size, format_land_use,
)

GREEN = (0, 100 / 255, 0)
GREY = (0.4, 0.4, 0.4)

PAGE = fitz.paper_rect("a4-l")  # 842 x 595 pt
MARGIN = 28
LEFT_COLUMN_RATIO = 0.22

BASE_CSS = """
* {font-family: %(family)s; color: #222;}
h2 {font-size: 11px; color: #006400; margin: 0 0 3px 0; border-bottom: 1px solid #006400;}
p {font-size: 8.5px; margin: 0 0 2px 0;}
b {color: #444;}
.local {color: #555;}
.title {font-size: 18px; font-weight: bold; color: #006400; text-align: center; margin: 0;}
.subtitle {font-size: 13px; text-align: center; margin: 0;}
.number {font-size: 10px; text-align: right; margin: 0;}
.caption {font-size: 7px; text-align: center; color: #555; margin: 0;}
.legal p {font-size: 7px;}
.footer {font-size: 7.5px; text-align: center; color: #555; margin: 0;}
.sig {font-size: 8.5px; text-align: center; margin: 0;}
"""


def _pdf_date(value: date) -> str:
    return f"D:{value.strftime('%Y%m%d')}000000Z"


def _esc(value: Optional[str]) -> str:
    return html.escape(value or "").replace("\n", "<br>")


def _bilingual(text: BilingualText) -> str:
    if text.local:
        return f"{_esc(text.primary)} <span class='local'>/ {_esc(text.local)}</span>"
    return _esc(text.primary)


def _rows(rows: List[Tuple[str, str]]) -> str:
    return "".join(f"<p><b>{html.escape(label)}:</b> {value}</p>" for label, value in rows)


class CertificateComposer(DocumentComposerPort):
    """Renders the certificate page; pure with respect to its inputs"""

    def __init__(self, font_file: Optional[str] = None):
        font_file = settings.CERTIFICATE_FONT_FILE if font_file is None else font_file
        self.archive = None
        family = "sans-serif"
        if font_file and os.path.isfile(font_file):
            self.archive = fitz.Archive(os.path.dirname(os.path.abspath(font_file)))
            family = "certfont, sans-serif"
            self.css = (f"@font-face {{font-family: certfont; src: url({os.path.basename(font_file)});}}"
                        + BASE_CSS % {"family": family})
        else:
            self.css = BASE_CSS % {"family": family}

    # ==================== public API ====================

    def compose(self, record: CertificateRecord, assets: ResolvedAssets,
                optical_code: bytes) -> Artifact:
        doc = fitz.open()
        try:
            page = doc.new_page(width=PAGE.width, height=PAGE.height)
            self._draw_border(page)
            self._draw_header(page, record, assets.emblem)
            self._draw_left_column(page, record, assets, optical_code)
            self._draw_right_column(page, record, assets)
            self._draw_signatures(page, record, assets)
            self._draw_footer(page, assets.emblem)
            self._set_metadata(doc, record)
            pdf = doc.tobytes(garbage=3, deflate=True, no_new_id=True)
        finally:
            doc.close()
        return Artifact(certificate_number=record.certificate_number, pdf=pdf)

    def rasterize(self, artifact: Artifact, dpi: int = 150) -> bytes:
        """PNG export of the composed page, taken from the PDF bytes"""
        with fitz.open(stream=artifact.pdf, filetype="pdf") as doc:
            return doc[0].get_pixmap(dpi=dpi).tobytes("png")

    # ==================== layout ====================

    @property
    def _inner(self) -> fitz.Rect:
        return fitz.Rect(MARGIN, MARGIN, PAGE.width - MARGIN, PAGE.height - MARGIN)

    def _html(self, page: fitz.Page, rect: fitz.Rect, body: str) -> None:
        page.insert_htmlbox(rect, body, css=self.css, archive=self.archive)

    def _image(self, page: fitz.Page, rect: fitz.Rect, asset: ResolvedAsset) -> None:
        page.insert_image(rect, stream=asset.content, keep_proportion=True)

    def _draw_border(self, page: fitz.Page) -> None:
        page.draw_rect(fitz.Rect(12, 12, PAGE.width - 12, PAGE.height - 12), color=GREEN, width=3)
        page.draw_rect(fitz.Rect(18, 18, PAGE.width - 18, PAGE.height - 18), color=GREEN, width=0.8)

    def _draw_header(self, page: fitz.Page, record: CertificateRecord, emblem: ResolvedAsset) -> None:
        inner = self._inner
        self._image(page, fitz.Rect(inner.x0, inner.y0, inner.x0 + 72, inner.y0 + 48), emblem)
        self._html(page, fitz.Rect(inner.x0 + 90, inner.y0, inner.x1 - 150, inner.y0 + 70),
                   f"<p class='title'>{_esc(settings.JURISDICTION_NAME)}</p>"
                   f"<p class='subtitle'>{_esc(settings.JURISDICTION_NAME_LOCAL)}</p>"
                   "<p class='subtitle'>Land Registration Certificate / የመሬት ምዝገባ የምስክር ወረቀት</p>")
        self._html(page, fitz.Rect(inner.x1 - 150, inner.y0, inner.x1, inner.y0 + 48),
                   "<p class='number'><b>Certificate No.</b></p>"
                   f"<p class='number'>{_esc(record.certificate_number)}</p>")
        page.draw_line(fitz.Point(inner.x0, inner.y0 + 74), fitz.Point(inner.x1, inner.y0 + 74),
                       color=GREEN, width=1)

    def _left_bounds(self) -> Tuple[float, float]:
        inner = self._inner
        return inner.x0, inner.x0 + inner.width * LEFT_COLUMN_RATIO

    def _draw_left_column(self, page: fitz.Page, record: CertificateRecord,
                          assets: ResolvedAssets, optical_code: bytes) -> None:
        x0, x1 = self._left_bounds()
        center = (x0 + x1) / 2
        top = self._inner.y0 + 82

        self._image(page, fitz.Rect(center - 50, top, center + 50, top + 120), assets[AssetSlot.OWNER_PHOTO])
        page.draw_rect(fitz.Rect(center - 50, top, center + 50, top + 120), color=GREY, width=0.5)

        qr_top = top + 128
        page.insert_image(fitz.Rect(center - 40, qr_top, center + 40, qr_top + 80),
                          stream=optical_code, keep_proportion=True)
        self._html(page, fitz.Rect(x0, qr_top + 82, x1, qr_top + 110),
                   "<p class='caption'>Scan to verify certificate authenticity</p>"
                   f"<p class='caption'>{_esc(verification_url(record.certificate_number))}</p>")

        plan_top = qr_top + 114
        self._image(page, fitz.Rect(x0 + 6, plan_top, x1 - 6, plan_top + 100), assets[AssetSlot.LAND_PLAN_IMAGE])
        self._html(page, fitz.Rect(x0, plan_top + 101, x1, plan_top + 114), "<p class='caption'>Land Plan</p>")

    def _draw_right_column(self, page: fitz.Page, record: CertificateRecord, assets: ResolvedAssets) -> None:
        inner = self._inner
        _, left_x1 = self._left_bounds()
        x0 = left_x1 + 12
        photos_x0 = inner.x1 - 180
        text_x1 = photos_x0 - 10
        top = inner.y0 + 82
        middle = (x0 + text_x1) / 2

        owner = record.owner
        land = record.land
        location = land.location
        self._html(page, fitz.Rect(x0, top, middle - 4, top + 150),
                   "<h2>Owner Information</h2>" + _rows([
                       ("Full Name", _esc(owner.display_name)
                        + (f" <span class='local'>/ {_esc(owner.local_display_name)}</span>"
                           if owner.local_display_name else "")),
                       ("National ID", _esc(owner.national_id)),
                       ("Phone", _esc(owner.phone)),
                       ("Address", _bilingual(owner.address)),
                       ("Registration No.", _esc(record.registration_number)),
                       ("Parcel ID", _esc(record.parcel_id)),
                   ]))
        land_rows = [
            ("Region", _bilingual(location.region)),
            ("Zone", _bilingual(location.zone)),
            ("Woreda", _bilingual(location.woreda)),
            ("Kebele", _bilingual(location.kebele)),
        ]
        if location.block:
            land_rows.append(("Block", _esc(location.block)))
        land_rows += [
            ("Land Size", _esc(format_land_size(land.size, land.size_unit))),
            ("Land Use", _esc(format_land_use(land.land_use))),
            ("Description", _bilingual(land.description)),
        ]
        self._html(page, fitz.Rect(middle + 4, top, text_x1, top + 150),
                   "<h2>Land Information</h2>" + _rows(land_rows))

        issuance = record.issuance
        self._html(page, fitz.Rect(x0, top + 154, text_x1, top + 200),
                   "<h2>Certificate Validity</h2>" + _rows([
                       ("Date of Issue", _esc(format_date(issuance.issued_date))),
                       ("Valid Until", _esc(format_date(issuance.expiration_date))),
                       ("Issuing Authority", _bilingual(issuance.issuing_authority)),
                   ]))

        legal = record.legal
        self._html(page, fitz.Rect(x0, top + 204, text_x1, top + 352),
                   "<div class='legal'><h2>Legal Rights &amp; Terms</h2>"
                   f"<p>{_esc(legal.rights.primary)}</p><p>{_esc(legal.terms.primary)}</p>"
                   f"<p class='local'>{_esc(legal.rights.local)}</p>"
                   f"<p class='local'>{_esc(legal.terms.local)}</p></div>")

        for index, (slot, caption) in enumerate([(AssetSlot.LAND_PHOTO, "Land Photo"),
                                                 (AssetSlot.BOUNDARY_PHOTO, "Boundary Photo")]):
            y0 = top + index * 178
            self._image(page, fitz.Rect(photos_x0, y0, inner.x1, y0 + 158), assets[slot])
            self._html(page, fitz.Rect(photos_x0, y0 + 159, inner.x1, y0 + 172),
                       f"<p class='caption'>{caption}</p>")

    def _draw_signatures(self, page: fitz.Page, record: CertificateRecord, assets: ResolvedAssets) -> None:
        inner = self._inner
        top = inner.y1 - 92
        boxes = [
            (inner.x0 + 200, assets[AssetSlot.OWNER_SIGNATURE], "Owner's Signature",
             record.owner.display_name),
            (inner.x1 - 380, assets[AssetSlot.OFFICER_SIGNATURE], "Registration Officer",
             settings.REGISTRY_OFFICE_NAME),
        ]
        for x0, signature, label, name in boxes:
            x1 = x0 + 180
            if signature.is_fallback:
                page.draw_line(fitz.Point(x0 + 10, top + 36), fitz.Point(x1 - 10, top + 36),
                               color=(0, 0, 0), width=0.8)
            else:
                self._image(page, fitz.Rect(x0 + 10, top, x1 - 10, top + 34), signature)
            self._html(page, fitz.Rect(x0, top + 38, x1, top + 62),
                       f"<p class='sig'>{_esc(name)}</p><p class='sig'><b>{_esc(label)}</b></p>")

    def _draw_footer(self, page: fitz.Page, emblem: ResolvedAsset) -> None:
        inner = self._inner
        top = inner.y1 - 26
        page.draw_line(fitz.Point(inner.x0, top - 2), fitz.Point(inner.x1, top - 2), color=GREEN, width=0.5)
        self._image(page, fitz.Rect(inner.x0, top, inner.x0 + 36, top + 24), emblem)
        self._html(page, fitz.Rect(inner.x0 + 44, top, inner.x1 - 44, top + 26),
                   "<p class='footer'>This certificate is an official document issued by the "
                   f"{_esc(settings.REGISTRY_OFFICE_NAME)}</p>"
                   f"<p class='footer'>{_esc(settings.JURISDICTION_NAME)} {_esc(settings.ISSUING_AUTHORITY)}</p>")

    def _set_metadata(self, doc: fitz.Document, record: CertificateRecord) -> None:
        stamp = _pdf_date(record.issuance.issued_date)
        doc.set_metadata({
            "title": f"Land Registration Certificate {record.certificate_number}",
            "author": settings.ISSUING_AUTHORITY,
            "subject": record.parcel_id,
            "keywords": record.certificate_number,
            "creator": settings.APP_NAME,
            "producer": settings.APP_NAME,
            "creationDate": stamp,
            "modDate": stamp,
        })
