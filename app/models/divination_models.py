# app/models/divination_models.py
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.services.divination.tarot_services import SPREAD_ALIASES, TAROT_SPREADS

SERVICE_TYPES = ("tarot", "astrology", "bazi", "yijing")
ServiceType = Literal["tarot", "astrology", "bazi", "yijing"]
Gender = Literal["male", "female", "other"]

MAX_QUESTION_LENGTH = 500
MAX_NAME_LENGTH = 100


class DivinationRequest(BaseModel):
    """Fields arrive in camelCase from the web client; snake_case is accepted as well."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    enhanced: bool = True


def _not_in_future(value: Optional[date]) -> Optional[date]:
    if value is not None and value > date.today():
        raise ValueError("Birth date cannot be in the future")
    return value


class TarotRequest(DivinationRequest):
    spread_type: str
    question: Optional[str] = Field(default=None, max_length=MAX_QUESTION_LENGTH)
    name: Optional[str] = Field(default=None, max_length=MAX_NAME_LENGTH)
    birth_date: Optional[date] = None
    seed: Optional[int] = None

    @field_validator("spread_type")
    @classmethod
    def check_spread_type(cls, value: str) -> str:
        if value not in TAROT_SPREADS and value not in SPREAD_ALIASES:
            raise ValueError("Invalid spread type")
        return value


class AstrologyRequest(DivinationRequest):
    birth_date: date
    name: Optional[str] = Field(default=None, max_length=MAX_NAME_LENGTH)
    question: Optional[str] = Field(default=None, max_length=MAX_QUESTION_LENGTH)

    @field_validator("birth_date")
    @classmethod
    def check_birth_date(cls, value: date) -> date:
        return _not_in_future(value)


class BirthTime(BaseModel):
    hour: int = Field(default=12, ge=0, le=23)
    minute: int = Field(default=0, ge=0, le=59)


class BaziRequest(DivinationRequest):
    birth_date: date
    birth_time: Optional[BirthTime] = None
    name: Optional[str] = Field(default=None, max_length=MAX_NAME_LENGTH)
    gender: Optional[Gender] = None
    question: Optional[str] = Field(default=None, max_length=MAX_QUESTION_LENGTH)

    @field_validator("birth_date")
    @classmethod
    def check_birth_date(cls, value: date) -> date:
        return _not_in_future(value)


class YijingRequest(DivinationRequest):
    method: Literal["time", "numbers"]
    timestamp: Optional[datetime] = None
    numbers: Optional[List[int]] = None
    question: Optional[str] = Field(default=None, max_length=MAX_QUESTION_LENGTH)

    @model_validator(mode="after")
    def check_numbers(self):
        if self.method == "numbers":
            if not self.numbers:
                raise ValueError("Numbers are required for numbers method")
            if len(self.numbers) < 3:
                raise ValueError("At least 3 numbers are required")
            if any(number < 1 for number in self.numbers):
                raise ValueError("Each number must be a positive integer")
        return self


class PredictionResult(BaseModel):
    title: str = Field(max_length=200)
    content: str = Field(min_length=200, max_length=5000)
    summary: str = Field(max_length=500)
    advice: List[str] = Field(min_length=1)
    imagery: Optional[str] = None
