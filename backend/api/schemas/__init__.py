"""
API schemas, re-exported

  from api.schemas import CertificateResponse, TokenResponse
"""
from api.schemas.common import ResponseBase
from api.schemas.auth import UserLoginRequest, TokenResponse, UserResponse
from api.schemas.certificate import (
    BilingualTextSchema, OwnerSchema, LocationSchema, LandSchema, IssuanceSchema, LegalTextSchema,
    CertificateCreateRequest, CertificateChangesRequest,
    CertificateResponse, CertificateSummary, CertificateListResponse,
    PublicCertificateSchema, VerificationResponse,
)
