"""
User model for forum accounts.

Stores credentials as a bcrypt hash plus the per-user activity counters
maintained by the topic and message managers.
"""

from sqlalchemy import Column, Integer, String, DateTime
from datetime import datetime

from brainwave.database import Base


class User(Base):
    """
    User model for forum identity and authentication.

    Attributes:
        id: Primary key
        username: Unique username (3-20 chars, alphanumeric + underscore)
        password_hash: Salted bcrypt hash of the password
        email: Contact address, unique by application logic
        reset_code: 6-digit code, set only during a password reset
        topics_opened: Number of topics created by this user
        messages_sent: Number of messages posted by this user
        created_at: User registration timestamp
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(20), unique=True, nullable=False, index=True)
    password_hash = Column(String(60), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    reset_code = Column(String(6), nullable=True, default=None)
    topics_opened = Column(Integer, nullable=False, default=0)
    messages_sent = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}')>"
