"""User repository interface"""
from abc import ABC, abstractmethod
from typing import List, Optional

from domain.entities.user import UserEntity


class UserRepository(ABC):
    @abstractmethod
    async def get_by_id(self, user_id: int) -> Optional[UserEntity]: ...
    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[UserEntity]: ...
    @abstractmethod
    async def update_last_login(self, user_id: int) -> None: ...
    @abstractmethod
    async def create(self, email: str, password_hash: str, name: str, role: str,
                     phone: Optional[str] = None) -> UserEntity: ...
    @abstractmethod
    async def list(self) -> List[UserEntity]: ...
