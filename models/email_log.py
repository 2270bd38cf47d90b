from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, Text, DateTime, func

from models.base import Base


# One row per email attempt (sent or failed)
class EmailLog(Base):
    __tablename__ = 'email_logs'

    id = Column(Integer, primary_key=True, unique=True)
    user_id = Column(Integer, nullable=True)
    order_id = Column(Integer, nullable=True)
    recipient = Column(String, nullable=False)
    email_type = Column(String(50), nullable=False)
    subject = Column(String, nullable=True)
    status = Column(String(20), nullable=False)  # 'sent' | 'failed'
    error_message = Column(Text, nullable=True)
    sent_at = Column(DateTime, default=func.now())


class EmailLogDTO(BaseModel):
    id: int | None = None
    user_id: int | None = None
    order_id: int | None = None
    recipient: str | None = None
    email_type: str | None = None
    subject: str | None = None
    status: str | None = None
    error_message: str | None = None
    sent_at: datetime | None = None
