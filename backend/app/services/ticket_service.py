"""Ticket service — support tickets raised by users and handled by admins."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.models.ticket import Ticket, TICKET_CATEGORIES, TICKET_STATUSES
from app.services.errors import BadRequestError, NotFoundError

logger = logging.getLogger(__name__)


def create_ticket(db: Session, user_id: str, category: str, subject: str, message: str) -> Ticket:
    if category not in TICKET_CATEGORIES:
        raise BadRequestError(f"Invalid category '{category}'")
    if not subject.strip() or not message.strip():
        raise BadRequestError("Subject and message are required")

    ticket = Ticket(
        user_id=user_id,
        category=category,
        subject=subject.strip(),
        message=message,
        status="pending",
    )
    db.add(ticket)
    db.commit()
    db.refresh(ticket)
    logger.info("Ticket %s (%s) opened by %s", ticket.id, category, user_id)
    return ticket


def list_user_tickets(db: Session, user_id: str) -> list[Ticket]:
    return (
        db.query(Ticket)
        .filter(Ticket.user_id == user_id)
        .order_by(Ticket.created_at.desc())
        .all()
    )


def list_all_tickets(db: Session) -> list[Ticket]:
    return db.query(Ticket).order_by(Ticket.created_at.desc()).all()


def update_ticket(db: Session, ticket_id: str, status: str, admin_response: Optional[str] = None) -> Ticket:
    """Admin moves a ticket along and optionally replies."""
    if status not in TICKET_STATUSES:
        raise BadRequestError(f"Invalid status '{status}'")
    ticket = db.query(Ticket).filter(Ticket.id == ticket_id).first()
    if not ticket:
        raise NotFoundError("Ticket not found")

    ticket.status = status
    ticket.admin_response = admin_response or None
    db.commit()
    db.refresh(ticket)
    logger.info("Ticket %s moved to %s", ticket_id, status)
    return ticket
