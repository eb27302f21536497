"""Asset resolution port"""
from abc import ABC, abstractmethod
from typing import Mapping, Optional

from domain.entities.asset import AssetSource, ResolvedAsset, ResolvedAssets
from domain.enums import AssetKind, AssetSlot


class AssetResolverPort(ABC):
    @abstractmethod
    async def resolve(self, source: Optional[AssetSource], kind: AssetKind) -> ResolvedAsset: ...
    @abstractmethod
    async def resolve_all(self, sources: Mapping[AssetSlot, Optional[AssetSource]]) -> ResolvedAssets: ...
