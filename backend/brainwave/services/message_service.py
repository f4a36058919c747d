"""
Message service layer for message management operations.

Handles posting messages, threading replies under a parent message,
likes and dislikes, and listing the messages of a topic.
"""

import logging
from typing import Optional, List
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from brainwave.config import get_settings
from brainwave.database import transaction
from brainwave.models.message import Message
from brainwave.models.topic import Topic
from brainwave.models.user import User
from brainwave.services.errors import (
    CrossTopicMismatchError,
    CycleDetectedError,
    InconsistentStateError,
    InvalidInputError,
    MessageNotFoundError,
)
from brainwave.services.topic_service import TopicManager
from brainwave.services.user_service import UserManager


logger = logging.getLogger(__name__)
settings = get_settings()


def validate_body(body: str) -> tuple[bool, Optional[str]]:
    """
    Validate message text.

    Args:
        body: Message text to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not body or not body.strip():
        return False, "Message text is required"

    if len(body) > settings.forum.MESSAGE_MAX_LENGTH:
        return False, f"Message must not exceed {settings.forum.MESSAGE_MAX_LENGTH} characters"

    return True, None


class MessageManager:
    """
    Manages messages within topics.

    Responsibilities:
    - Post messages, keeping the author's and the topic's counters in step
    - Link a reply to a parent message of the same topic
    - Tally likes and dislikes
    """

    def __init__(self, db: Session, users: UserManager = None, topics: TopicManager = None):
        """
        Initialize MessageManager.

        Args:
            db: Database session all operations run against
            users: UserManager used to resolve authors (built on db if omitted)
            topics: TopicManager used to resolve topics (built on db if omitted)
        """
        self.db = db
        self.users = users or UserManager(db)
        self.topics = topics or TopicManager(db, self.users)

    def create(self, topic_title: str, body: str, username: str) -> Message:
        """
        Post a message to a topic.

        The insert and the increments of the author's messages_sent and the
        topic's messages counter commit together or not at all.

        Args:
            topic_title: Title of the topic to post in
            body: Message text
            username: Author's username

        Returns:
            Created Message object

        Raises:
            InvalidInputError: If the body is invalid
            UserNotFoundError: If the author does not exist
            TopicNotFoundError: If the topic does not exist
        """
        is_valid, error_message = validate_body(body)
        if not is_valid:
            raise InvalidInputError(error_message)

        author_id = self.users.get(username).id
        topic_id = self.topics.get_by_title(topic_title).id

        message = Message(body=body, user_id=author_id, topic_id=topic_id)

        try:
            with transaction(self.db):
                self.db.add(message)
                self.db.flush()
                self.db.query(User).filter(User.id == author_id).update(
                    {User.messages_sent: User.messages_sent + 1}, synchronize_session=False
                )
                self.db.query(Topic).filter(Topic.id == topic_id).update(
                    {Topic.messages: Topic.messages + 1}, synchronize_session=False
                )
        except SQLAlchemyError as e:
            logger.error(f"Failed to add message to topic {topic_title}: {str(e)}")
            raise InconsistentStateError(f"Could not add message to topic '{topic_title}'") from e

        self.db.refresh(message)
        logger.info(f"Message {message.id} added to topic '{topic_title}' by {username}")

        return message

    def get(self, message_id: int, role: str = "message") -> Message:
        """
        Get message by ID.

        Raises:
            MessageNotFoundError: If no message has this ID
        """
        message = self.db.query(Message).filter(Message.id == message_id).first()
        if not message:
            raise MessageNotFoundError(message_id, role)

        return message

    def set_parent(self, parent_id: int, child_id: int) -> Message:
        """
        Thread a message under a parent message.

        Both messages must belong to the same topic, and the link must not
        make the child its own ancestor.

        Returns:
            Updated child Message object

        Raises:
            MessageNotFoundError: If either message does not exist
            CrossTopicMismatchError: If the messages are in different topics
            CycleDetectedError: If the link would create a cycle
        """
        parent = self.get(parent_id, role="parent")
        child = self.get(child_id, role="child")

        if parent.topic_id != child.topic_id:
            logger.warning(
                f"Messages are not in the same topic: parent_id={parent_id}, child_id={child_id}"
            )
            raise CrossTopicMismatchError(parent_id, child_id)

        if self._is_ancestor(child_id, parent):
            logger.warning(f"Rejected cyclic parent link: parent_id={parent_id}, child_id={child_id}")
            raise CycleDetectedError(parent_id, child_id)

        with transaction(self.db):
            child.parent_id = parent_id

        logger.info(f"Parent set for message {child_id}: {parent_id}")
        return child

    def _is_ancestor(self, candidate_id: int, message: Message) -> bool:
        """True if candidate_id is message itself or one of its ancestors."""
        seen = set()
        current = message
        while current is not None and current.id not in seen:
            if current.id == candidate_id:
                return True
            seen.add(current.id)
            if current.parent_id is None:
                break
            current = self.db.query(Message).filter(Message.id == current.parent_id).first()

        return False

    def list_by_topic(self, topic_id: int) -> List[Message]:
        """
        Get all messages of a topic in posting order.

        Raises:
            TopicNotFoundError: If the topic does not exist
        """
        self.topics.get_by_id(topic_id)

        return self.db.query(Message).filter(
            Message.topic_id == topic_id
        ).order_by(Message.id).all()

    def like(self, message_id: int) -> Message:
        """Add one like to a message."""
        return self._rate(message_id, 1)

    def dislike(self, message_id: int) -> Message:
        """Remove one like from a message. The count may go negative."""
        return self._rate(message_id, -1)

    def _rate(self, message_id: int, delta: int) -> Message:
        with transaction(self.db):
            updated = self.db.query(Message).filter(Message.id == message_id).update(
                {Message.likes: Message.likes + delta}, synchronize_session=False
            )

        if updated == 0:
            logger.warning(f"Like/dislike on missing message: {message_id}")
            raise MessageNotFoundError(message_id)

        logger.info(f"Like {delta:+d} recorded for message {message_id}")
        return self.get(message_id)
