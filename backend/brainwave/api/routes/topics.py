"""
Topic API endpoints for creating, voting on, and browsing topics.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from brainwave.database import get_db
from brainwave.services.topic_service import TopicManager


router = APIRouter(prefix="/topics", tags=["topics"])


def get_topic_manager(db: Session = Depends(get_db)) -> TopicManager:
    """Build a TopicManager bound to the request's session."""
    return TopicManager(db)


# Request/Response models
class CreateTopicRequest(BaseModel):
    """Request model for creating a topic."""
    title: str = Field(..., min_length=1, max_length=200, description="Unique topic title")
    username: str = Field(..., min_length=1, description="Creator's username")


class TopicResponse(BaseModel):
    """Response model for topic data."""
    id: int
    title: str
    messages: int
    upvotes: int
    created_at: datetime
    creator_id: Optional[int] = None

    class Config:
        from_attributes = True


class TopicCountResponse(BaseModel):
    """Response model for the topic count."""
    count: int


@router.get("", response_model=List[TopicResponse])
async def list_topics(topics: TopicManager = Depends(get_topic_manager)):
    """
    List all topics in creation order.
    """
    return topics.list_all()


@router.get("/count", response_model=TopicCountResponse)
async def count_topics(topics: TopicManager = Depends(get_topic_manager)):
    """
    Count all topics.
    """
    return TopicCountResponse(count=topics.count())


@router.post("", response_model=TopicResponse, status_code=201)
async def create_topic(
    request: CreateTopicRequest,
    topics: TopicManager = Depends(get_topic_manager)
):
    """
    Create a topic.

    Raises:
        404: Creator not found
        409: Topic title already exists
    """
    return topics.create(request.title, request.username)


@router.get("/{title}", response_model=TopicResponse)
async def get_topic(
    title: str,
    topics: TopicManager = Depends(get_topic_manager)
):
    """
    Get topic by title.

    Raises:
        404: Topic not found
    """
    return topics.get_by_title(title)


@router.delete("/{title}", status_code=204)
async def delete_topic(
    title: str,
    topics: TopicManager = Depends(get_topic_manager)
):
    """
    Delete a topic and all of its messages.

    Returns:
        No content (204)

    Raises:
        404: Topic not found
    """
    topics.remove(title)
    return None


@router.post("/{title}/upvote", response_model=TopicResponse)
async def upvote_topic(
    title: str,
    topics: TopicManager = Depends(get_topic_manager)
):
    """
    Upvote a topic.

    Raises:
        404: Topic not found
    """
    return topics.upvote(title)


@router.post("/{title}/downvote", response_model=TopicResponse)
async def downvote_topic(
    title: str,
    topics: TopicManager = Depends(get_topic_manager)
):
    """
    Downvote a topic.

    Raises:
        404: Topic not found
    """
    return topics.downvote(title)
