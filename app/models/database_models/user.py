# app/models/database_models/user.py
from sqlalchemy import Boolean, Column, Date, DateTime, Integer, LargeBinary, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.data.database import Base
from app.models.database_models.prediction_record import PredictionRecord


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(30), unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(LargeBinary, nullable=False)
    is_active = Column(Boolean, default=True)

    birth_date = Column(Date, nullable=True)
    birth_time = Column(String(5), nullable=True)
    birth_place = Column(String(100), nullable=True)
    gender = Column(String(10), nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    last_login_at = Column(DateTime, nullable=True)

    prediction_records = relationship(
        "PredictionRecord", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def profile(self):
        return {
            "birthDate": self.birth_date.isoformat() if self.birth_date else None,
            "birthTime": self.birth_time,
            "birthPlace": self.birth_place,
            "gender": self.gender,
        }

    def to_public_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "profile": self.profile,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "lastLoginAt": self.last_login_at.isoformat() if self.last_login_at else None,
        }
