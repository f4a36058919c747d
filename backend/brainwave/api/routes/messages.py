"""
Message API endpoints for posting, threading, and rating messages.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from brainwave.database import get_db
from brainwave.services.message_service import MessageManager


router = APIRouter(prefix="/messages", tags=["messages"])


def get_message_manager(db: Session = Depends(get_db)) -> MessageManager:
    """Build a MessageManager bound to the request's session."""
    return MessageManager(db)


# Request/Response models
class CreateMessageRequest(BaseModel):
    """Request model for posting a message."""
    topic: str = Field(..., min_length=1, description="Title of the topic to post in")
    body: str = Field(..., min_length=1, max_length=10000, description="Message text")
    username: str = Field(..., min_length=1, description="Author's username")


class SetParentRequest(BaseModel):
    """Request model for threading a message under a parent."""
    parent_id: int = Field(..., description="ID of the parent message")


class MessageResponse(BaseModel):
    """Response model for message data."""
    id: int
    body: str
    created_at: datetime
    likes: int
    user_id: Optional[int] = None
    parent_id: Optional[int] = None
    topic_id: int

    class Config:
        from_attributes = True


@router.post("", response_model=MessageResponse, status_code=201)
async def create_message(
    request: CreateMessageRequest,
    messages: MessageManager = Depends(get_message_manager)
):
    """
    Post a message to a topic.

    Raises:
        404: Author or topic not found
    """
    return messages.create(request.topic, request.body, request.username)


@router.get("", response_model=List[MessageResponse])
async def list_messages(
    topic_id: int = Query(..., description="Topic to list messages for"),
    messages: MessageManager = Depends(get_message_manager)
):
    """
    List the messages of a topic in posting order.

    Raises:
        404: Topic not found
    """
    return messages.list_by_topic(topic_id)


@router.get("/{message_id}", response_model=MessageResponse)
async def get_message(
    message_id: int,
    messages: MessageManager = Depends(get_message_manager)
):
    """
    Get a message by ID.

    Raises:
        404: Message not found
    """
    return messages.get(message_id)


@router.put("/{message_id}/parent", response_model=MessageResponse)
async def set_parent(
    message_id: int,
    request: SetParentRequest,
    messages: MessageManager = Depends(get_message_manager)
):
    """
    Thread a message under a parent message of the same topic.

    Raises:
        400: Messages in different topics, or the link would form a cycle
        404: Parent or child message not found
    """
    return messages.set_parent(request.parent_id, message_id)


@router.post("/{message_id}/like", response_model=MessageResponse)
async def like_message(
    message_id: int,
    messages: MessageManager = Depends(get_message_manager)
):
    """
    Like a message.

    Raises:
        404: Message not found
    """
    return messages.like(message_id)


@router.post("/{message_id}/dislike", response_model=MessageResponse)
async def dislike_message(
    message_id: int,
    messages: MessageManager = Depends(get_message_manager)
):
    """
    Dislike a message.

    Raises:
        404: Message not found
    """
    return messages.dislike(message_id)
