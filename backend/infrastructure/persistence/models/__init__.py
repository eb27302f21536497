"""
ORM models, re-exported so Base.metadata knows every table
"""
from infrastructure.persistence.database import Base
from infrastructure.persistence.models.user import User
from infrastructure.persistence.models.certificate import Certificate
from infrastructure.persistence.models.certificate_asset import CertificateAsset
