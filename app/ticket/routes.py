# app/ticket/routes.py
from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from app.core.config import Settings
from app.ticket import services as ticket_service
from app.ticket.notifier import NotificationDispatcher, get_dispatcher
from app.ticket.schemas import NotifyRequest, NotifyResult, SupportTicket, TicketPage, TicketSubmitted
from app.ticket.store import TicketStore, get_store

router = APIRouter(tags=["Support"])
debug_router = APIRouter(prefix="/debug", tags=["Debug"])


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


@router.post("/support", response_model=TicketSubmitted)
def submit(payload: Any = Body(...), store: TicketStore = Depends(get_store)):
    ticket = ticket_service.parse_ticket(payload)
    ticket_id, created = ticket_service.submit_ticket(store, ticket)
    return TicketSubmitted(status="created" if created else "updated", id=ticket_id)


@router.post("/support/notify", response_model=NotifyResult)
async def notify(body: NotifyRequest, dispatcher: NotificationDispatcher = Depends(get_dispatcher)):
    return await dispatcher.notify(body.id, email=body.email, whatsapp=body.whatsapp)


@router.get("/tickets/{ticket_id}", response_model=SupportTicket)
def get(ticket_id: str, store: TicketStore = Depends(get_store)):
    return ticket_service.get_ticket(store, ticket_id)


# Unauthenticated on purpose, demo/debug only
@debug_router.get("/tickets", response_model=TicketPage)
def recent(
    store: TicketStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    count, tickets = ticket_service.list_recent(store, settings.DEBUG_TICKETS_LIMIT)
    return TicketPage(count=count, tickets=tickets)
