"""Document composer port"""
from abc import ABC, abstractmethod

from domain.entities.artifact import Artifact
from domain.entities.asset import ResolvedAssets
from domain.entities.certificate import CertificateRecord


class DocumentComposerPort(ABC):
    @abstractmethod
    def compose(self, record: CertificateRecord, assets: ResolvedAssets,
                optical_code: bytes) -> Artifact: ...
    @abstractmethod
    def rasterize(self, artifact: Artifact, dpi: int = 150) -> bytes: ...
