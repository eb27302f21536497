"""Asset value objects"""
import base64
from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from domain.enums import AssetKind, AssetOutcome, AssetSlot, RECORD_SLOTS


@dataclass(frozen=True)
class AssetSource:
    """Where an asset comes from: uploaded bytes, a data URI or a remote URL"""
    data: Union[bytes, str, None] = None
    filename: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.data


@dataclass(frozen=True)
class ResolvedAsset:
    """Canonical embeddable image (PNG) plus how it was obtained"""
    kind: AssetKind
    content: bytes
    outcome: AssetOutcome
    media_type: str = "image/png"
    reason: Optional[str] = None
    source_url: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.outcome != AssetOutcome.RESOLVED

    def to_data_uri(self) -> str:
        return f"data:{self.media_type};base64,{base64.b64encode(self.content).decode()}"


@dataclass
class ResolvedAssets:
    """All six record slots plus the jurisdiction emblem"""
    slots: Dict[AssetSlot, ResolvedAsset] = field(default_factory=dict)

    def __getitem__(self, slot: AssetSlot) -> ResolvedAsset:
        return self.slots[slot]

    @property
    def emblem(self) -> ResolvedAsset:
        return self.slots[AssetSlot.EMBLEM]

    @property
    def is_complete(self) -> bool:
        return all(slot in self.slots for slot in [*RECORD_SLOTS, AssetSlot.EMBLEM])

    def outcomes(self) -> Dict[AssetSlot, str]:
        return {slot: asset.outcome.value for slot, asset in self.slots.items()}

    def degraded(self) -> Dict[AssetSlot, Optional[str]]:
        """Slots that fell back, with the recorded reason"""
        return {slot: asset.reason for slot, asset in self.slots.items() if asset.is_fallback}
