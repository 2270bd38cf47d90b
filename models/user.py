from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, func

from models.base import Base


class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, unique=True)
    email = Column(String, nullable=False, unique=True)

    # Kickstarter backer data (imported from the campaign export)
    backer_number = Column(Integer, nullable=True)
    backer_uid = Column(String, nullable=True)
    backer_name = Column(String, nullable=True)
    reward_title = Column(String, nullable=True)
    pledge_amount = Column(Float, nullable=True)
    # Free text from the platform export; "dropped" (any case) = original payment failed
    pledged_status = Column(String, nullable=True)
    # Joined after the campaign window: pays retail prices
    is_late_pledge = Column(Boolean, nullable=False, default=False)

    shipping_country = Column(String, nullable=True)
    has_completed = Column(Boolean, nullable=False, default=False)
    last_login_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now())


class UserDTO(BaseModel):
    id: int | None = None
    email: str | None = None
    backer_number: int | None = None
    backer_uid: str | None = None
    backer_name: str | None = None
    reward_title: str | None = None
    pledge_amount: float | None = None
    pledged_status: str | None = None
    is_late_pledge: bool = False
    shipping_country: str | None = None
    has_completed: bool | None = None
    last_login_at: datetime | None = None
    created_at: datetime | None = None
