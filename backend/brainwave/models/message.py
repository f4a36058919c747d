"""
Message model for posts within a topic.

Messages may be threaded under a parent message of the same topic.
"""

from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey
from datetime import datetime

from brainwave.database import Base


class Message(Base):
    """
    Message model for forum posts.

    Attributes:
        id: Primary key
        body: Message text
        created_at: Posting timestamp
        likes: Net like count (may be negative)
        user_id: Foreign key to the author, NULL once the author is removed
        parent_id: Foreign key to the parent message in the same topic
        topic_id: Foreign key to the owning topic (cascade delete)
    """
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    body = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    likes = Column(Integer, nullable=False, default=0)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    parent_id = Column(Integer, ForeignKey("messages.id", ondelete="SET NULL"), nullable=True)
    topic_id = Column(Integer, ForeignKey("topics.id", ondelete="CASCADE"), nullable=False, index=True)

    def __repr__(self):
        return f"<Message(id={self.id}, topic_id={self.topic_id}, user_id={self.user_id})>"
