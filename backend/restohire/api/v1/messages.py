"""
Direct messaging endpoints.

Messages are exchanged between two users and may reference an application.
Sending a message triggers a best-effort NEW_MESSAGE notification.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from restohire.api.v1.auth import get_current_user
from restohire.core.errors import NotFoundError
from restohire.db.session import get_db
from restohire.models import (
    Application,
    Job,
    Message,
    NotificationType,
    Role,
    User,
)
from restohire.services.notifications import send_notification

logger = logging.getLogger("messages")

router = APIRouter()


# ============== Pydantic Schemas ==============


class MessageCreate(BaseModel):
    receiver_id: int
    content: str = Field(min_length=1)
    application_id: Optional[int] = None


class Participant(BaseModel):
    id: int
    name: Optional[str] = None
    role: Role


class MessageResponse(BaseModel):
    id: int
    content: str
    is_read: bool
    created_at: datetime
    sender: Participant
    receiver: Participant
    application_id: Optional[int] = None
    job_title: Optional[str] = None


class ConversationResponse(BaseModel):
    user: Participant
    last_message: MessageResponse
    unread_count: int = 0


def _participant(user: User) -> Participant:
    return Participant(id=user.id, name=user.name, role=user.role)


def _to_response(message: Message) -> MessageResponse:
    return MessageResponse(
        id=message.id,
        content=message.content,
        is_read=bool(message.is_read),
        created_at=message.created_at,
        sender=_participant(message.sender),
        receiver=_participant(message.receiver),
        application_id=message.application_id,
        job_title=message.application.job.title if message.application else None,
    )


def _message_query(db: Session):
    return db.query(Message).options(
        joinedload(Message.sender),
        joinedload(Message.receiver),
        joinedload(Message.application).joinedload(Application.job),
    )


def _check_application_access(db: Session, user: User, application_id: int) -> None:
    """Only the hiring owner and the applicant may message about an application."""
    application = (
        db.query(Application)
        .options(
            joinedload(Application.job).joinedload(Job.restaurant),
            joinedload(Application.worker),
        )
        .filter(Application.id == application_id)
        .first()
    )
    if not application:
        raise NotFoundError("Application not found")

    if user.role == Role.RESTAURANT_OWNER:
        allowed = application.job.restaurant.owner_id == user.id
    elif user.role == Role.WORKER:
        allowed = application.worker.user_id == user.id
    else:
        raise ValueError(f"Unhandled role: {user.role}")

    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized to message about this application",
        )


# ============== API Endpoints ==============


@router.post("", response_model=MessageResponse)
async def send_message(
    request: MessageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Send a message to another user.

    The message is stored first; the receiver's notification is attempted
    afterwards and its failure does not undo the send.
    """
    receiver = db.query(User).filter(User.id == request.receiver_id).first()
    if not receiver:
        raise NotFoundError("Receiver not found")

    if request.application_id is not None:
        _check_application_access(db, current_user, request.application_id)

    message = Message(
        sender_id=current_user.id,
        receiver_id=receiver.id,
        application_id=request.application_id,
        content=request.content,
        is_read=False,
    )
    db.add(message)
    db.commit()

    message_id = message.id
    sender_id, sender_name = current_user.id, current_user.name or "Someone"

    result = send_notification(
        db,
        NotificationType.NEW_MESSAGE,
        receiver.id,
        sender_id=sender_id,
        sender_name=sender_name,
        content=request.content,
        conversation_id=sender_id,
    )
    if not result and not result.skipped:
        logger.warning(f"Message notification failed for message {message_id}")

    return _to_response(_message_query(db).filter(Message.id == message_id).first())


@router.get("", response_model=list[MessageResponse])
async def get_thread(
    user_id: int = Query(..., description="The other participant"),
    application_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Messages exchanged with one user, oldest first.

    Messages the caller received from that user are marked read.
    """
    query = _message_query(db).filter(
        or_(
            (Message.sender_id == current_user.id) & (Message.receiver_id == user_id),
            (Message.sender_id == user_id) & (Message.receiver_id == current_user.id),
        )
    )
    if application_id is not None:
        query = query.filter(Message.application_id == application_id)

    messages = query.order_by(Message.created_at.asc(), Message.id.asc()).all()
    response = [_to_response(message) for message in messages]

    db.query(Message).filter(
        Message.sender_id == user_id,
        Message.receiver_id == current_user.id,
        Message.is_read.is_(False),
    ).update({Message.is_read: True}, synchronize_session=False)
    db.commit()

    return response


@router.get("/conversations", response_model=list[ConversationResponse])
async def get_conversations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """One entry per conversation partner with the latest message and unread count."""
    messages = (
        _message_query(db)
        .filter(or_(Message.sender_id == current_user.id, Message.receiver_id == current_user.id))
        .order_by(Message.created_at.desc(), Message.id.desc())
        .all()
    )

    conversations: dict[int, ConversationResponse] = {}
    for message in messages:
        other = message.receiver if message.sender_id == current_user.id else message.sender
        if other.id not in conversations:
            conversations[other.id] = ConversationResponse(
                user=_participant(other),
                last_message=_to_response(message),
            )
        if message.receiver_id == current_user.id and not message.is_read:
            conversations[other.id].unread_count += 1

    return list(conversations.values())
