"""Tickets router — users raise support tickets (disputes, cancellations, account issues)."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.ticket import Ticket
from app.models.user import User
from app.schemas.ticket import TicketCreate, TicketResponse
from app.middleware.auth import get_current_user
from app.services import ticket_service
from app.services.time_windows import ensure_utc

router = APIRouter(prefix="/api/tickets", tags=["tickets"])


def ticket_fields(ticket: Ticket) -> dict:
    return {
        "id": ticket.id,
        "user_id": ticket.user_id,
        "category": ticket.category,
        "subject": ticket.subject,
        "message": ticket.message,
        "status": ticket.status,
        "admin_response": ticket.admin_response,
        "created_at": ensure_utc(ticket.created_at).isoformat(),
    }


@router.post("", response_model=TicketResponse, status_code=201)
def create_ticket(
    req: TicketCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ticket = ticket_service.create_ticket(db, current_user.id, req.category, req.subject, req.message)
    return TicketResponse(**ticket_fields(ticket))


@router.get("", response_model=list[TicketResponse])
def my_tickets(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    tickets = ticket_service.list_user_tickets(db, current_user.id)
    return [TicketResponse(**ticket_fields(t)) for t in tickets]
