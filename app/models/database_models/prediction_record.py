# app/models/database_models/prediction_record.py
from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.data.database import Base


class PredictionRecord(Base):
    __tablename__ = "prediction_records"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    service_type = Column(String(20), nullable=False, index=True)
    input_data = Column(JSON, nullable=False)

    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    summary = Column(String(500), nullable=False)
    advice = Column(JSON, nullable=False)
    imagery = Column(String, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), index=True)

    user = relationship("User", back_populates="prediction_records")

    __table_args__ = (
        Index("ix_prediction_records_user_created", "user_id", "created_at"),
        Index("ix_prediction_records_user_service", "user_id", "service_type"),
        Index("ix_prediction_records_user_service_created", "user_id", "service_type", "created_at"),
    )

    @property
    def result(self):
        return {
            "title": self.title,
            "content": self.content,
            "summary": self.summary,
            "advice": self.advice,
            "imagery": self.imagery,
        }

    def to_summary_dict(self):
        return {
            "id": self.id,
            "serviceType": self.service_type,
            "result": {"title": self.title, "summary": self.summary},
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "serviceType": self.service_type,
            "inputData": self.input_data,
            "result": self.result,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
