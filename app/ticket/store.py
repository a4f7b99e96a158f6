# app/ticket/store.py
from __future__ import annotations

from threading import Lock

from fastapi import Request

from app.ticket.schemas import SupportTicket


class TicketStore:
    """Volatile, insertion-ordered ticket collection keyed by id.

    Request handlers run on a thread pool, so every access goes through one lock.
    """

    def __init__(self) -> None:
        self._tickets: list[SupportTicket] = []
        self._lock = Lock()

    def upsert(self, ticket: SupportTicket) -> tuple[str, bool]:
        """Replace the ticket with the same id in place, or append it.

        A replacement keeps the ``created_at`` of the ticket it replaces.
        Returns ``(id, created)``.
        """
        stored = ticket.model_copy(deep=True)
        with self._lock:
            for index, existing in enumerate(self._tickets):
                if existing.id == ticket.id:
                    stored.created_at = existing.created_at
                    self._tickets[index] = stored
                    return ticket.id, False
            self._tickets.append(stored)
            return ticket.id, True

    def get(self, ticket_id: str) -> SupportTicket | None:
        with self._lock:
            for ticket in self._tickets:
                if ticket.id == ticket_id:
                    return ticket.model_copy(deep=True)
        return None

    def list(self, limit: int | None = None) -> list[SupportTicket]:
        with self._lock:
            items = self._tickets if limit is None else self._tickets[-limit:] if limit > 0 else []
            return [t.model_copy(deep=True) for t in items]

    def __len__(self) -> int:
        with self._lock:
            return len(self._tickets)


# Common store dependency
def get_store(request: Request) -> TicketStore:
    return request.app.state.store
