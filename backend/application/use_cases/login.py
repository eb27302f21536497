"""Registry officer login"""
from dataclasses import dataclass
from typing import Callable

from loguru import logger

from domain.exceptions import InvalidCredentialsError
from application.ports.user_repository import UserRepository


@dataclass
class LoginInput:
    email: str
    password: str


@dataclass
class LoginOutput:
    user_id: int
    email: str
    name: str
    role: str


class LoginUseCase:
    """Every failure looks the same to the caller; the reason only goes to the log"""

    def __init__(self, user_repo: UserRepository, verify_password_fn: Callable[[str, str], bool]):
        self._user_repo = user_repo
        self._verify_password = verify_password_fn

    async def execute(self, input: LoginInput) -> LoginOutput:
        email = input.email.strip().lower()
        user = await self._user_repo.get_by_email(email)
        if user is None:
            logger.warning(f"Login failed for {email}: unknown account")
            raise InvalidCredentialsError()
        if not self._verify_password(input.password, user.password_hash):
            logger.warning(f"Login failed for {email}: wrong password")
            raise InvalidCredentialsError()
        if not user.is_active:
            logger.warning(f"Login failed for {email}: account disabled")
            raise InvalidCredentialsError()

        await self._user_repo.update_last_login(user.id)
        return LoginOutput(user_id=user.id, email=user.email, name=user.name, role=user.role)
