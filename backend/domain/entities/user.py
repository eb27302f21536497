"""Registry officer domain entity"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class UserEntity:
    """User domain entity, used for business logic rather than the ORM model"""
    id: int
    email: str
    name: str
    role: str  # "registration" | "admin"
    is_active: bool
    password_hash: str = ""
    phone: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
