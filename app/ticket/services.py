# app/ticket/services.py
import random
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from app.core.exceptions import InvalidPayload, TicketNotFound
from app.core.logging import get_logger
from app.ticket.schemas import SupportTicket, TicketCreate
from app.ticket.store import TicketStore

logger = get_logger(__name__)


def generate_ticket_id() -> str:
    # Best effort only, collisions simply upsert over the older ticket
    return f"SUP{random.randint(100000, 999999)}"


def parse_ticket(payload: Any) -> TicketCreate:
    try:
        return TicketCreate.model_validate(payload)
    except ValidationError as exc:
        raise InvalidPayload(exc.errors(include_url=False)) from exc


def submit_ticket(store: TicketStore, payload: TicketCreate) -> tuple[str, bool]:
    ticket_id = (payload.id or "").strip() or generate_ticket_id()
    ticket = SupportTicket(
        **payload.model_dump(exclude={"id"}),
        id=ticket_id,
        created_at=datetime.now(timezone.utc),
    )
    _, created = store.upsert(ticket)
    logger.info(
        "ticket_upserted",
        ticket_id=ticket_id,
        ticket_type=ticket.type.value,
        created=created,
        total=len(store),
    )
    return ticket_id, created


def get_ticket(store: TicketStore, ticket_id: str) -> SupportTicket:
    ticket = store.get(ticket_id)
    if ticket is None:
        raise TicketNotFound(ticket_id)
    return ticket


def list_recent(store: TicketStore, limit: int) -> tuple[int, list[SupportTicket]]:
    return len(store), store.list(limit)
