"""Resolved certificate asset ORM model (canonical PNG per slot)"""
from sqlalchemy import Column, Integer, String, LargeBinary, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from infrastructure.persistence.database import Base
from domain.enums import AssetSlot, AssetKind, AssetOutcome


class CertificateAsset(Base):
    __tablename__ = "certificate_assets"
    __table_args__ = (UniqueConstraint("certificate_id", "slot", name="uq_certificate_asset_slot"),)

    id = Column(Integer, primary_key=True, index=True)
    certificate_id = Column(Integer, ForeignKey("certificates.id", ondelete="CASCADE"), nullable=False, index=True)
    slot = Column(Enum(AssetSlot), nullable=False)
    kind = Column(Enum(AssetKind), nullable=False)
    media_type = Column(String(50), nullable=False, default="image/png")
    content = Column(LargeBinary, nullable=False)
    outcome = Column(String(20), nullable=False)
    reason = Column(String(500), nullable=True)
    source_url = Column(String(1000), nullable=True)

    certificate = relationship("Certificate", back_populates="assets")

    def __repr__(self):
        return f"<CertificateAsset {self.slot} ({self.outcome})>"
