"""Certificate registry repository interface"""
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from domain.entities.asset import ResolvedAssets
from domain.entities.certificate import CertificateRecord
from domain.enums import CertificateStatus


class CertificateRepository(ABC):
    """The registry is the single source of truth for certificate records"""

    @abstractmethod
    async def create(self, record: CertificateRecord, assets: ResolvedAssets) -> CertificateRecord: ...
    @abstractmethod
    async def get_by_number(self, certificate_number: str) -> CertificateRecord: ...
    @abstractmethod
    async def get_by_id(self, certificate_id: int) -> CertificateRecord: ...
    @abstractmethod
    async def list(self, page: int = 1, page_size: int = 20,
                   status: Optional[CertificateStatus] = None) -> Tuple[List[CertificateRecord], int]: ...
    @abstractmethod
    async def update_status(self, certificate_number: str,
                            new_status: CertificateStatus) -> CertificateRecord: ...
    @abstractmethod
    async def update(self, certificate_id: int, record: CertificateRecord,
                     assets: Optional[ResolvedAssets] = None) -> CertificateRecord: ...
    @abstractmethod
    async def delete(self, certificate_id: int) -> None: ...
    @abstractmethod
    async def get_assets(self, certificate_id: int) -> ResolvedAssets: ...
