# app/ticket/notifier.py
"""Best-effort delivery of ticket alerts over email (Resend) and WhatsApp (Interakt)."""
import asyncio
from collections.abc import Awaitable, Callable

import httpx
from fastapi import Request

from app.core.config import Settings
from app.core.exceptions import ProviderFailure
from app.core.logging import get_logger
from app.ticket import services as ticket_service
from app.ticket.formatter import render_ticket_summary, render_whatsapp_values
from app.ticket.schemas import ChannelStatus, NotifyResult, SupportTicket
from app.ticket.store import TicketStore

logger = get_logger(__name__)


def _raise_for_provider(provider: str, response: httpx.Response) -> None:
    if not response.is_success:
        raise ProviderFailure(provider, response.status_code, response.text[:500])


class ResendEmailClient:
    provider = "resend"

    def __init__(self, http: httpx.AsyncClient, *, api_url: str, api_key: str | None, from_address: str | None):
        self.http = http
        self.api_url = api_url
        self.api_key = api_key
        self.from_address = from_address

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.from_address)

    async def send(self, *, to: str, subject: str, html: str) -> None:
        response = await self.http.post(
            self.api_url,
            headers={"Authorization": f"Bearer {self.api_key}"},
            json={"from": self.from_address, "to": [to], "subject": subject, "html": html},
        )
        _raise_for_provider(self.provider, response)


def split_phone(number: str, default_country_code: str) -> tuple[str, str]:
    """Split ``"+91 98765-43210"`` into ``("+91", "9876543210")``.

    Numbers without a leading ``+`` are taken as national numbers.
    """
    raw = number.strip()
    digits = "".join(ch for ch in raw if ch.isdigit())
    country = "".join(ch for ch in default_country_code if ch.isdigit())
    if raw.startswith("+") and country and digits.startswith(country):
        return f"+{country}", digits[len(country):]
    if raw.startswith("+") and len(digits) > 10:
        # unknown country code; assume a 10 digit national number
        return f"+{digits[:-10]}", digits[-10:]
    return f"+{country}", digits


class InteraktWhatsAppClient:
    provider = "interakt"

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        api_url: str | None,
        api_key: str | None,
        sender_id: str | None,
        template_name: str,
        language_code: str,
        default_country_code: str,
    ):
        self.http = http
        self.api_url = api_url
        self.api_key = api_key
        self.sender_id = sender_id
        self.template_name = template_name
        self.language_code = language_code
        self.default_country_code = default_country_code

    @property
    def configured(self) -> bool:
        return bool(self.api_url and self.api_key)

    def build_payload(self, *, to: str, callback: str, body_values: list[str]) -> dict:
        country_code, phone_number = split_phone(to, self.default_country_code)
        payload = {
            "countryCode": country_code,
            "phoneNumber": phone_number,
            "callbackData": callback,
            "type": "Template",
            "template": {
                "name": self.template_name,
                "languageCode": self.language_code,
                "headerValues": [],
                "bodyValues": body_values,
            },
        }
        if self.sender_id:
            payload["sender"] = self.sender_id
        return payload

    async def send(self, *, to: str, callback: str, body_values: list[str]) -> None:
        response = await self.http.post(
            self.api_url,
            headers={"Authorization": f"Bearer {self.api_key}"},
            json=self.build_payload(to=to, callback=callback, body_values=body_values),
        )
        _raise_for_provider(self.provider, response)


class NotificationDispatcher:
    def __init__(
        self,
        store: TicketStore,
        email_client: ResendEmailClient,
        whatsapp_client: InteraktWhatsAppClient,
        *,
        default_email_to: str | None = None,
        default_whatsapp_to: str | None = None,
    ):
        self.store = store
        self.email_client = email_client
        self.whatsapp_client = whatsapp_client
        self.default_email_to = default_email_to
        self.default_whatsapp_to = default_whatsapp_to

    @classmethod
    def from_settings(cls, settings: Settings, store: TicketStore, http: httpx.AsyncClient) -> "NotificationDispatcher":
        return cls(
            store,
            ResendEmailClient(
                http,
                api_url=settings.RESEND_API_URL,
                api_key=settings.RESEND_API_KEY,
                from_address=settings.RESEND_FROM,
            ),
            InteraktWhatsAppClient(
                http,
                api_url=settings.INTERAKT_API_URL,
                api_key=settings.INTERAKT_API_KEY,
                sender_id=settings.INTERAKT_SENDER_ID,
                template_name=settings.INTERAKT_TEMPLATE_NAME,
                language_code=settings.INTERAKT_LANGUAGE_CODE,
                default_country_code=settings.INTERAKT_DEFAULT_COUNTRY_CODE,
            ),
            default_email_to=settings.SUPPORT_EMAIL_TO,
            default_whatsapp_to=settings.SUPPORT_WHATSAPP_TO,
        )

    async def notify(self, ticket_id: str, *, email: str | None = None, whatsapp: str | None = None) -> NotifyResult:
        """Send the ticket to every configured channel.

        Raises ``TicketNotFound`` for an unknown id. Provider errors never
        escape; they show up as ``failed`` for that channel only.
        """
        ticket = ticket_service.get_ticket(self.store, ticket_id)
        email_to = (email or self.default_email_to or "").strip()
        whatsapp_to = (whatsapp or self.default_whatsapp_to or "").strip()

        email_status, whatsapp_status = await asyncio.gather(
            self._dispatch("email", ticket, email_to, self.email_client.configured, self._send_email),
            self._dispatch("whatsapp", ticket, whatsapp_to, self.whatsapp_client.configured, self._send_whatsapp),
        )
        logger.info(
            "ticket_notified",
            ticket_id=ticket.id,
            email=email_status.value,
            whatsapp=whatsapp_status.value,
        )
        return NotifyResult(id=ticket.id, email=email_status, whatsapp=whatsapp_status)

    async def _dispatch(
        self,
        channel: str,
        ticket: SupportTicket,
        destination: str,
        configured: bool,
        send: Callable[[SupportTicket, str], Awaitable[None]],
    ) -> ChannelStatus:
        if not destination or not configured:
            return ChannelStatus.SKIPPED
        try:
            await send(ticket, destination)
        except ProviderFailure as exc:
            logger.warning(
                "notify_channel_failed",
                ticket_id=ticket.id,
                channel=channel,
                provider_status=exc.provider_status,
                body=exc.body,
            )
            return ChannelStatus.FAILED
        except httpx.HTTPError as exc:
            logger.warning(
                "notify_channel_failed",
                ticket_id=ticket.id,
                channel=channel,
                error=repr(exc),
            )
            return ChannelStatus.FAILED
        except Exception:
            # e.g. httpx.InvalidURL from a misconfigured provider URL
            logger.exception("notify_channel_error", ticket_id=ticket.id, channel=channel)
            return ChannelStatus.FAILED
        return ChannelStatus.SENT

    async def _send_email(self, ticket: SupportTicket, to: str) -> None:
        subject, html = render_ticket_summary(ticket)
        await self.email_client.send(to=to, subject=subject, html=html)

    async def _send_whatsapp(self, ticket: SupportTicket, to: str) -> None:
        await self.whatsapp_client.send(
            to=to,
            callback=ticket.id,
            body_values=render_whatsapp_values(ticket),
        )


def get_dispatcher(request: Request) -> NotificationDispatcher:
    return request.app.state.dispatcher
