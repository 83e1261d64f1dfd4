# edutrack/models/users_models.py
from sqlalchemy import Column, String, DateTime
from .base import Base, new_id, utcnow


class DBUserProfile(Base):
    __tablename__ = "user_profiles"

    id = Column(String, primary_key=True, default=new_id)
    email = Column(String, unique=True, nullable=False)
    full_name = Column(String, nullable=False)
    role = Column(String, nullable=False, index=True)  # student / teacher / parent
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
