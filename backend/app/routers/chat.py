"""Chat router — messages between the two parties of a session."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.models.chat_message import ChatMessage
from app.models.user import User
from app.schemas.chat import MessageCreate, MessageResponse
from app.middleware.auth import get_current_user
from app.middleware.rate_limit import limiter
from app.services import chat_service
from app.services.time_windows import ensure_utc

router = APIRouter(prefix="/api/sessions", tags=["chat"])


def _message_to_response(msg: ChatMessage) -> MessageResponse:
    return MessageResponse(
        id=msg.id,
        session_id=msg.session_id,
        sender_id=msg.sender_id,
        sender_name=msg.sender.name if msg.sender else "Unknown",
        message=msg.message,
        sanitized=msg.sanitized,
        created_at=ensure_utc(msg.created_at).isoformat(),
    )


@router.post("/{session_id}/messages", response_model=MessageResponse, status_code=201)
@limiter.limit(settings.CHAT_RATE_LIMIT)
def send_message(
    request: Request,
    session_id: str,
    req: MessageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Send a chat message. Contact details are redacted until the sender's first closed session."""
    msg = chat_service.send_message(db, session_id, current_user.id, req.message)
    return _message_to_response(msg)


@router.get("/{session_id}/messages", response_model=list[MessageResponse])
def get_messages(
    session_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    messages = chat_service.get_messages(db, session_id, current_user.id)
    return [_message_to_response(m) for m in messages]
