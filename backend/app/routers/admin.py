"""Admin router — sessions, disputes, tickets, analytics and user lookup."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.admin import AnalyticsResponse, TutorCountResponse, UserDetailResponse, UserStats
from app.schemas.auth import UserResponse
from app.schemas.session import SessionResponse
from app.schemas.ticket import AdminTicketResponse, TicketUpdate
from app.middleware.auth import require_admin
from app.routers.auth import user_to_response
from app.routers.profiles import profile_to_response
from app.routers.sessions import session_to_response
from app.routers.tickets import ticket_fields
from app.services import admin_service, ticket_service

router = APIRouter(prefix="/api/admin", tags=["admin"])


def _admin_ticket(ticket) -> AdminTicketResponse:
    return AdminTicketResponse(
        **ticket_fields(ticket),
        user_name=ticket.user.name if ticket.user else "Unknown",
        user_email=ticket.user.email if ticket.user else "",
    )


@router.get("/tutor-count", response_model=TutorCountResponse)
def tutor_count(db: Session = Depends(get_db)):
    """Public: number of tutor profiles on the platform."""
    return TutorCountResponse(tutor_count=admin_service.get_tutor_count(db))


@router.get("/sessions", response_model=list[SessionResponse])
def all_sessions(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return [session_to_response(s) for s in admin_service.list_all_sessions(db)]


@router.get("/disputes", response_model=list[SessionResponse])
def disputed_sessions(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return [session_to_response(s) for s in admin_service.list_disputed_sessions(db)]


@router.get("/tickets", response_model=list[AdminTicketResponse])
def all_tickets(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return [_admin_ticket(t) for t in ticket_service.list_all_tickets(db)]


@router.patch("/tickets/{ticket_id}", response_model=AdminTicketResponse)
def update_ticket(
    ticket_id: str,
    req: TicketUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    ticket = ticket_service.update_ticket(db, ticket_id, req.status, req.admin_response)
    return _admin_ticket(ticket)


@router.get("/analytics", response_model=AnalyticsResponse)
def analytics(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return AnalyticsResponse(**admin_service.get_analytics(db))


@router.get("/users", response_model=list[UserResponse])
def all_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return [user_to_response(u) for u in admin_service.list_users(db)]


@router.get("/users/search", response_model=list[UserResponse])
def search_users(
    q: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return [user_to_response(u) for u in admin_service.search_users(db, q)]


@router.get("/users/{user_id}", response_model=UserDetailResponse)
def user_detail(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    detail = admin_service.get_user_detail(db, user_id)
    return UserDetailResponse(
        user=user_to_response(detail["user"]),
        student_profile=profile_to_response(detail["student_profile"]) if detail["student_profile"] else None,
        tutor_profile=profile_to_response(detail["tutor_profile"]) if detail["tutor_profile"] else None,
        stats=UserStats(**detail["stats"]),
    )
