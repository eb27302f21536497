"""Authentication router"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from config import settings
from infrastructure.persistence.database import get_session
from infrastructure.persistence.models.user import User
from infrastructure.persistence.repositories.user_repository import SqlAlchemyUserRepository
from domain.entities.user import UserEntity
from domain.exceptions import InvalidCredentialsError
from application.use_cases.login import LoginInput, LoginUseCase
from api.schemas.auth import UserLoginRequest, TokenResponse, UserResponse
from api.dependencies import get_current_user
from infrastructure.auth.password_service import verify_password
from infrastructure.auth.jwt_service import create_access_token, create_refresh_token

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/login", response_model=TokenResponse)
async def login(request: UserLoginRequest, session: AsyncSession = Depends(get_session)):
    use_case = LoginUseCase(SqlAlchemyUserRepository(session), verify_password)
    try:
        output = await use_case.execute(LoginInput(email=request.email, password=request.password))
    except InvalidCredentialsError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail="Incorrect email or password.")

    access_token = create_access_token({"sub": output.user_id})
    refresh_token = create_refresh_token({"sub": output.user_id})
    logger.info(f"User logged in: {output.email}")
    return TokenResponse(access_token=access_token, refresh_token=refresh_token,
                         expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: UserEntity = Depends(get_current_user),
                 session: AsyncSession = Depends(get_session)):
    model = await session.get(User, current_user.id)
    return UserResponse(id=current_user.id, email=current_user.email, name=current_user.name,
                        phone=current_user.phone, role=current_user.role,
                        is_active=current_user.is_active, created_at=model.created_at)
