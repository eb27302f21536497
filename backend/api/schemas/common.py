"""Common response schemas"""
from typing import Optional
from pydantic import BaseModel


class ResponseBase(BaseModel):
    success: bool = True
    message: Optional[str] = None
