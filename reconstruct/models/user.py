"""User model: password users and external-identity (Firebase/Google) users."""
from sqlalchemy import Boolean, Column, DateTime, Integer, String

from reconstruct.db.session import Base
from reconstruct.models.mixins import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    # null for external-identity users who never stored a password
    password_hash = Column(String(255), nullable=True)
    firebase_uid = Column(String(128), nullable=True)
    welcome_email_sent = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
