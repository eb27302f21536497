"""Verification payload codec port"""
from abc import ABC, abstractmethod

from domain.entities.verification import VerificationPayload


class OpticalCodecPort(ABC):
    @abstractmethod
    def encode(self, payload: VerificationPayload) -> bytes: ...
    @abstractmethod
    def decode(self, image: bytes) -> str: ...
    @abstractmethod
    def extract_lookup_key(self, raw: str) -> str: ...
