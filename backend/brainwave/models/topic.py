"""
Topic model for discussion threads.

A topic owns its messages: deleting a topic removes them through the
ON DELETE CASCADE on messages.topic_id.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from datetime import datetime

from brainwave.database import Base


class Topic(Base):
    """
    Topic model for named discussion threads.

    Attributes:
        id: Primary key
        title: Unique topic title
        messages: Denormalized count of messages in this topic
        upvotes: Net vote count (may be negative)
        created_at: Topic creation timestamp
        creator_id: Foreign key to the creating user, NULL once that user is removed
    """
    __tablename__ = "topics"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), unique=True, nullable=False, index=True)
    messages = Column(Integer, nullable=False, default=0)
    upvotes = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    creator_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    def __repr__(self):
        return f"<Topic(id={self.id}, title='{self.title}', creator_id={self.creator_id})>"
