"""Rendered certificate artifact"""
import hashlib
from dataclasses import dataclass


@dataclass(frozen=True)
class Artifact:
    certificate_number: str
    pdf: bytes

    @property
    def sha256(self) -> str:
        return hashlib.sha256(self.pdf).hexdigest()

    @property
    def filename(self) -> str:
        return f"certificate-{self.certificate_number or 'new'}.pdf"
