"""Chat service — per-session messaging between the two parties."""

import logging

from sqlalchemy.orm import Session

from app.models.chat_message import ChatMessage
from app.services import session_service
from app.services.errors import BadRequestError
from app.services.moderation import check_content, redact_unless_trusted

logger = logging.getLogger(__name__)


def send_message(db: Session, session_id: str, sender_id: str, text: str) -> ChatMessage:
    """Store a message from a session party.

    Contact details are redacted until the sender has a closed session. The
    check runs against the sender's closed-session count at send time.
    """
    session_service.get_session_for_party(db, session_id, sender_id)

    check = check_content(text)
    if not check["safe"]:
        raise BadRequestError(check["reason"])

    completed = session_service.count_closed_sessions(db, sender_id)
    final_text, sanitized = redact_unless_trusted(text, completed)

    message = ChatMessage(
        session_id=session_id,
        sender_id=sender_id,
        message=final_text,
        sanitized=sanitized,
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    if sanitized:
        logger.info("Redacted contact details from message %s in session %s", message.id, session_id)
    return message


def get_messages(db: Session, session_id: str, user_id: str) -> list[ChatMessage]:
    """Messages of a session, oldest first. Parties only."""
    session_service.get_session_for_party(db, session_id, user_id)
    return (
        db.query(ChatMessage)
        .filter(ChatMessage.session_id == session_id)
        .order_by(ChatMessage.created_at.asc())
        .all()
    )
