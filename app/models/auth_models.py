# app/models/auth_models.py
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.divination_models import Gender

USERNAME_PATTERN = r"^[A-Za-z0-9_]+$"
BIRTH_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class PasswordValidationError(Exception):
    def __init__(self, messages: List[str]):
        self.messages = messages
        super().__init__(", ".join(messages))


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProfileUpdate(CamelModel):
    birth_date: Optional[date] = None
    birth_time: Optional[str] = Field(default=None, pattern=BIRTH_TIME_PATTERN)
    birth_place: Optional[str] = Field(default=None, max_length=100)
    gender: Optional[Gender] = None


class UserCreate(CamelModel):
    username: str = Field(min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    email: str
    password: str
    profile: Optional[ProfileUpdate] = None


class LoginRequest(CamelModel):
    email: str
    password: str


class TokenData(BaseModel):
    user_id: Optional[int] = None
    email: Optional[str] = None
    token_type: Optional[str] = None
