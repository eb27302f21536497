"""SQLAlchemy user repository"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from application.ports.user_repository import UserRepository
from domain.entities.user import UserEntity
from domain.enums import UserRole
from domain.exceptions import DuplicateError
from infrastructure.persistence.models.user import User


def to_entity(model: User) -> UserEntity:
    return UserEntity(id=model.id, email=model.email, name=model.name,
                      role=model.role.value, is_active=model.is_active,
                      password_hash=model.password_hash, phone=model.phone)


class SqlAlchemyUserRepository(UserRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: int) -> Optional[UserEntity]:
        model = await self.session.get(User, user_id)
        return to_entity(model) if model else None

    async def get_by_email(self, email: str) -> Optional[UserEntity]:
        result = await self.session.execute(select(User).where(User.email == email))
        model = result.scalar_one_or_none()
        return to_entity(model) if model else None

    async def update_last_login(self, user_id: int) -> None:
        model = await self.session.get(User, user_id)
        if model is not None:
            model.last_login_at = datetime.utcnow()
            await self.session.flush()

    async def create(self, email: str, password_hash: str, name: str, role: str,
                     phone: Optional[str] = None) -> UserEntity:
        email = email.strip().lower()
        model = User(email=email, password_hash=password_hash, name=name,
                     role=UserRole(role), phone=phone)
        self.session.add(model)
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            raise DuplicateError("email", email)
        return to_entity(model)

    async def list(self) -> List[UserEntity]:
        result = await self.session.execute(select(User).order_by(User.id))
        return [to_entity(m) for m in result.scalars().all()]
