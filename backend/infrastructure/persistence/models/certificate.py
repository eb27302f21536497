"""Certificate ORM model"""
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Text, Float, Date, DateTime, Enum, ForeignKey, Index, text,
)
from sqlalchemy.orm import relationship
from infrastructure.persistence.database import Base
from domain.enums import CertificateStatus, SizeUnit, LandUseType


class Certificate(Base):
    __tablename__ = "certificates"
    __table_args__ = (
        # At most one non-revoked certificate per parcel. Enum columns store member names.
        Index(
            "uq_certificates_parcel_live",
            "parcel_id",
            unique=True,
            sqlite_where=text("status != 'REVOKED'"),
            postgresql_where=text("status != 'REVOKED'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    certificate_number = Column(String(32), unique=True, index=True, nullable=False)
    registration_number = Column(String(32), unique=True, index=True, nullable=False)
    parcel_id = Column(String(64), nullable=False)
    status = Column(Enum(CertificateStatus), default=CertificateStatus.PENDING, nullable=False, index=True)

    # Owner
    owner_first_name = Column(String(100), nullable=False)
    owner_first_name_local = Column(String(100), nullable=True)
    owner_last_name = Column(String(100), nullable=False)
    owner_last_name_local = Column(String(100), nullable=True)
    owner_national_id = Column(String(50), nullable=False)
    owner_phone = Column(String(20), nullable=False)
    owner_address = Column(String(255), nullable=False)
    owner_address_local = Column(String(255), nullable=True)
    owner_date_of_birth = Column(Date, nullable=True)

    # Land
    region = Column(String(100), nullable=False)
    region_local = Column(String(100), nullable=True)
    zone = Column(String(100), nullable=False)
    zone_local = Column(String(100), nullable=True)
    woreda = Column(String(100), nullable=False)
    woreda_local = Column(String(100), nullable=True)
    kebele = Column(String(100), nullable=False)
    kebele_local = Column(String(100), nullable=True)
    block = Column(String(50), nullable=True)
    land_size = Column(Float, nullable=False)
    size_unit = Column(Enum(SizeUnit), default=SizeUnit.SQUARE_METERS, nullable=False)
    land_use = Column(Enum(LandUseType), nullable=False)
    description = Column(Text, nullable=False, default="")
    description_local = Column(Text, nullable=True)

    # Legal text
    rights = Column(Text, nullable=False)
    rights_local = Column(Text, nullable=True)
    terms = Column(Text, nullable=False)
    terms_local = Column(Text, nullable=True)

    # Issuance
    issued_date = Column(Date, nullable=False)
    expiration_date = Column(Date, nullable=True)
    issuing_authority = Column(String(200), nullable=False)
    issuing_authority_local = Column(String(200), nullable=True)

    artifact_sha256 = Column(String(64), nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    creator = relationship("User", back_populates="certificates")
    assets = relationship("CertificateAsset", back_populates="certificate",
                          cascade="all, delete-orphan", lazy="selectin")

    def __repr__(self):
        return f"<Certificate {self.certificate_number} [{self.status}]>"
