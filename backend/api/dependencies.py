"""
FastAPI dependencies (Depends)

Common dependencies shared by every router: authentication, repositories
and the certificate use cases wired to their infrastructure.
"""
from functools import lru_cache

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from domain.entities.user import UserEntity
from domain.enums import UserRole
from domain.identifiers import IdentifierGenerator
from application.use_cases.issue_certificate import IssueCertificateUseCase
from application.use_cases.manage_certificate import (
    DeleteCertificateUseCase, ListCertificatesUseCase, UpdateCertificateUseCase,
)
from application.use_cases.render_certificate import RenderCertificateUseCase
from application.use_cases.verify_certificate import VerifyCertificateUseCase
from infrastructure.assets.resolver import AssetResolutionPipeline
from infrastructure.auth.jwt_service import decode_token
from infrastructure.codec.qr_codec import QrCodec
from infrastructure.persistence.database import get_session
from infrastructure.persistence.repositories.certificate_repository import SqlAlchemyCertificateRepository
from infrastructure.persistence.repositories.user_repository import SqlAlchemyUserRepository
from infrastructure.rendering.composer import CertificateComposer

security = HTTPBearer()

REGISTRY_ROLES = {UserRole.ADMIN.value, UserRole.REGISTRATION.value}


# ==================== auth ====================

async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    session: AsyncSession = Depends(get_session)
) -> UserEntity:
    """Return the authenticated user"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid authentication credentials.",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(credentials.credentials)
    if payload is None or payload.get("type") != "access":
        raise credentials_exception

    user_id_raw = payload.get("sub")
    if user_id_raw is None:
        raise credentials_exception
    try:
        user_id = int(user_id_raw)
    except (ValueError, TypeError):
        raise credentials_exception

    user = await SqlAlchemyUserRepository(session).get_by_id(user_id)
    if user is None:
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                            detail="This account is disabled.")
    return user


async def get_registry_user(
    current_user: UserEntity = Depends(get_current_user)
) -> UserEntity:
    """Registration officer or administrator"""
    if current_user.role not in REGISTRY_ROLES:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                            detail="Registration officer role required.")
    return current_user


async def get_admin_user(
    current_user: UserEntity = Depends(get_current_user)
) -> UserEntity:
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                            detail="Administrator role required.")
    return current_user


# ==================== engine components ====================

@lru_cache()
def get_asset_resolver() -> AssetResolutionPipeline:
    return AssetResolutionPipeline()


@lru_cache()
def get_codec() -> QrCodec:
    return QrCodec()


@lru_cache()
def get_composer() -> CertificateComposer:
    return CertificateComposer()


def get_identifier_generator() -> IdentifierGenerator:
    return IdentifierGenerator(certificate_prefix=settings.CERTIFICATE_NUMBER_PREFIX,
                               registration_prefix=settings.REGISTRATION_NUMBER_PREFIX)


def get_certificate_repository(
    session: AsyncSession = Depends(get_session)
) -> SqlAlchemyCertificateRepository:
    return SqlAlchemyCertificateRepository(session)


# ==================== use cases ====================

def get_issue_use_case(
    repository: SqlAlchemyCertificateRepository = Depends(get_certificate_repository),
    generator: IdentifierGenerator = Depends(get_identifier_generator),
    resolver: AssetResolutionPipeline = Depends(get_asset_resolver),
    codec: QrCodec = Depends(get_codec),
    composer: CertificateComposer = Depends(get_composer),
) -> IssueCertificateUseCase:
    return IssueCertificateUseCase(repository=repository, generator=generator, resolver=resolver,
                                   codec=codec, composer=composer,
                                   max_attempts=settings.NUMBER_MAX_ATTEMPTS)


def get_update_use_case(
    repository: SqlAlchemyCertificateRepository = Depends(get_certificate_repository),
    resolver: AssetResolutionPipeline = Depends(get_asset_resolver),
    codec: QrCodec = Depends(get_codec),
    composer: CertificateComposer = Depends(get_composer),
) -> UpdateCertificateUseCase:
    return UpdateCertificateUseCase(repository=repository, resolver=resolver, codec=codec, composer=composer)


def get_list_use_case(
    repository: SqlAlchemyCertificateRepository = Depends(get_certificate_repository),
) -> ListCertificatesUseCase:
    return ListCertificatesUseCase(repository)


def get_delete_use_case(
    repository: SqlAlchemyCertificateRepository = Depends(get_certificate_repository),
) -> DeleteCertificateUseCase:
    return DeleteCertificateUseCase(repository)


def get_render_use_case(
    repository: SqlAlchemyCertificateRepository = Depends(get_certificate_repository),
    codec: QrCodec = Depends(get_codec),
    composer: CertificateComposer = Depends(get_composer),
) -> RenderCertificateUseCase:
    return RenderCertificateUseCase(repository=repository, codec=codec, composer=composer,
                                    raster_dpi=settings.RASTER_DPI)


def get_verify_use_case(
    repository: SqlAlchemyCertificateRepository = Depends(get_certificate_repository),
    codec: QrCodec = Depends(get_codec),
) -> VerifyCertificateUseCase:
    return VerifyCertificateUseCase(repository=repository, codec=codec)
