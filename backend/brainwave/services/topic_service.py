"""
Topic service layer for topic management operations.

Handles topic creation, removal, voting, and lookup.
"""

import logging
from typing import Optional, List
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from brainwave.config import get_settings
from brainwave.database import transaction
from brainwave.models.topic import Topic
from brainwave.models.user import User
from brainwave.services.errors import (
    DuplicateTitleError,
    InconsistentStateError,
    InvalidInputError,
    TopicNotFoundError,
)
from brainwave.services.user_service import UserManager


logger = logging.getLogger(__name__)
settings = get_settings()


def validate_title(title: str) -> tuple[bool, Optional[str]]:
    """
    Validate topic title.

    Args:
        title: Title to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not title or not title.strip():
        return False, "Topic title is required"

    if len(title) > settings.forum.TITLE_MAX_LENGTH:
        return False, f"Topic title must not exceed {settings.forum.TITLE_MAX_LENGTH} characters"

    # Titles are addressed as a single path segment
    if "/" in title:
        return False, "Topic title must not contain '/'"

    if title.lower() in settings.forum.RESERVED_TITLES:
        return False, f"Topic title '{title}' is reserved"

    return True, None


class TopicManager:
    """
    Manages topics.

    Responsibilities:
    - Create topics and keep the creator's topics_opened counter in step
    - Remove topics (messages go with them)
    - Tally up and down votes
    """

    def __init__(self, db: Session, users: UserManager = None):
        """
        Initialize TopicManager.

        Args:
            db: Database session all operations run against
            users: UserManager used to resolve creators (built on db if omitted)
        """
        self.db = db
        self.users = users or UserManager(db)

    def create(self, title: str, username: str) -> Topic:
        """
        Create a topic and increment the creator's topics_opened counter.

        Both writes commit together or not at all.

        Args:
            title: Unique topic title
            username: Creator's username

        Returns:
            Created Topic object

        Raises:
            InvalidInputError: If the title is invalid
            UserNotFoundError: If the creator does not exist
            DuplicateTitleError: If the title is taken
        """
        is_valid, error_message = validate_title(title)
        if not is_valid:
            raise InvalidInputError(error_message)

        creator = self.users.get(username)
        creator_id = creator.id

        if self.find_by_title(title):
            logger.warning(f"Topic title already exists: {title}")
            raise DuplicateTitleError(title)

        topic = Topic(title=title, creator_id=creator_id)

        try:
            with transaction(self.db):
                self.db.add(topic)
                self.db.flush()
                self.db.query(User).filter(User.id == creator_id).update(
                    {User.topics_opened: User.topics_opened + 1}, synchronize_session=False
                )
        except IntegrityError:
            logger.warning(f"Unique constraint violation creating topic {title}")
            raise DuplicateTitleError(title)
        except SQLAlchemyError as e:
            logger.error(f"Failed to create topic {title}: {str(e)}")
            raise InconsistentStateError(f"Could not create topic '{title}'") from e

        self.db.refresh(topic)
        logger.info(f"Topic added successfully: {title}")

        return topic

    def remove(self, title: str) -> None:
        """
        Delete a topic.

        The store cascades the delete to all messages of the topic.

        Raises:
            TopicNotFoundError: If no topic has this title
        """
        with transaction(self.db):
            deleted = self.db.query(Topic).filter(Topic.title == title).delete(
                synchronize_session=False
            )

        if deleted == 0:
            logger.warning(f"No topic found with title: {title}")
            raise TopicNotFoundError(title)

        logger.info(f"Topic removed successfully: {title}")

    def upvote(self, title: str) -> Topic:
        """Add one vote to a topic."""
        return self._vote(title, 1)

    def downvote(self, title: str) -> Topic:
        """Remove one vote from a topic. The count may go negative."""
        return self._vote(title, -1)

    def _vote(self, title: str, delta: int) -> Topic:
        with transaction(self.db):
            updated = self.db.query(Topic).filter(Topic.title == title).update(
                {Topic.upvotes: Topic.upvotes + delta}, synchronize_session=False
            )

        if updated == 0:
            logger.warning(f"Vote on missing topic: {title}")
            raise TopicNotFoundError(title)

        topic = self.get_by_title(title)
        logger.info(f"Vote {delta:+d} recorded for topic: {title}")

        return topic

    def list_all(self) -> List[Topic]:
        """
        Get all topics in creation order.

        Returns:
            List of all Topic objects
        """
        return self.db.query(Topic).order_by(Topic.id).all()

    def find_by_title(self, title: str) -> Optional[Topic]:
        """Get topic by title, or None."""
        return self.db.query(Topic).filter(Topic.title == title).first()

    def get_by_title(self, title: str) -> Topic:
        """
        Get topic by title.

        Raises:
            TopicNotFoundError: If no topic has this title
        """
        topic = self.find_by_title(title)
        if not topic:
            raise TopicNotFoundError(title)

        return topic

    def get_by_id(self, topic_id: int) -> Topic:
        """
        Get topic by ID.

        Raises:
            TopicNotFoundError: If no topic has this ID
        """
        topic = self.db.query(Topic).filter(Topic.id == topic_id).first()
        if not topic:
            raise TopicNotFoundError(topic_id)

        return topic

    def count(self) -> int:
        """Number of topics."""
        return self.db.query(Topic).count()
