# app/ticket/formatter.py
"""Turns a stored ticket into the text that goes out to a human.

Everything that came from the storefront is escaped before it touches the
email HTML.
"""
from html import escape

from app.ticket.schemas import Cart, SupportTicket, TicketType

CURRENCY = "₹"

_LABEL = "padding: 6px 0; color: #6b7280; width: 140px;"
_VALUE = "padding: 6px 0; color: #111827;"
_CELL = "padding: 6px 8px; border-bottom: 1px solid #e5e7eb;"


def esc(value: object) -> str:
    if value is None:
        return ""
    return escape(str(value), quote=True)


def format_money(value: float | int | None) -> str:
    if value is None or isinstance(value, bool):
        return ""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return ""
    return f"{CURRENCY}{max(number, 0.0):,.2f}"


def format_qty(value: float | int | None) -> str:
    if value is None:
        return ""
    return f"{value:g}"


def format_km(value: float | None) -> str:
    if value is None:
        return "-"
    return f"{value:g} km"


def is_help(ticket: SupportTicket) -> bool:
    return ticket.type == TicketType.MANUAL_SUPPORT or ticket.reason.lower() == "help"


def ticket_label(ticket: SupportTicket) -> str:
    return "Help request" if is_help(ticket) else "Out of delivery zone"


def _row(label: str, value: str) -> str:
    return f'<tr><td style="{_LABEL}">{label}</td><td style="{_VALUE}">{value}</td></tr>'


def _customer_block(ticket: SupportTicket) -> str:
    customer = ticket.customer
    address = customer.address
    lines = [address.line1, address.line2, address.landmark, address.city]
    address_html = "<br>".join(esc(line) for line in lines if line)
    if address.address_type:
        address_html += f" <em>({esc(address.address_type)})</em>"
    rows = [
        _row("Name", esc(customer.name)),
        _row("WhatsApp", esc(customer.whatsapp)),
        _row("Contact", esc(customer.contact)),
        _row("Address", address_html),
    ]
    return "<h3>Customer</h3><table>" + "".join(rows) + "</table>"


def _help_block(ticket: SupportTicket) -> str:
    help_ = ticket.help
    rows = [
        _row("Topic", esc(help_.topic) if help_ else ""),
        _row("Order ID", esc(help_.order_id) if help_ else ""),
        _row("Reason", esc(ticket.reason)),
    ]
    message = esc(help_.message) if help_ else ""
    return (
        "<h3>Help topic</h3><table>" + "".join(rows) + "</table>"
        f'<p style="white-space: pre-wrap;">{message}</p>'
    )


def _location_block(ticket: SupportTicket) -> str:
    rows = [
        _row("Pincode", esc(ticket.pincode)),
        _row("Distance", esc(format_km(ticket.distance_km))),
        _row("Max distance", esc(format_km(ticket.max_km))),
        _row("Reason", esc(ticket.reason)),
    ]
    return "<h3>Location</h3><table>" + "".join(rows) + "</table>"


def _cart_block(cart: Cart | None) -> str:
    header = (
        f'<tr><th style="{_CELL}">Item</th><th style="{_CELL}">Qty</th>'
        f'<th style="{_CELL}">Price</th><th style="{_CELL}">Amount</th></tr>'
    )
    if cart is None or not cart.items:
        body = f'<tr><td colspan="4" style="{_CELL}">No items in cart</td></tr>'
    else:
        body = "".join(
            f'<tr><td style="{_CELL}">{esc(item.name)}</td>'
            f'<td style="{_CELL}">{esc(format_qty(item.qty))}</td>'
            f'<td style="{_CELL}">{esc(format_money(item.price))}</td>'
            f'<td style="{_CELL}">{esc(format_money(item.amount))}</td></tr>'
            for item in cart.items
        )
    totals = ""
    if cart is not None:
        totals = (
            "<table>"
            + _row("Subtotal", esc(format_money(cart.subtotal)))
            + _row("Discount", esc(format_money(cart.discount)))
            + _row("Payable", f"<strong>{esc(format_money(cart.payable))}</strong>")
            + "</table>"
        )
    return (
        '<h3>Cart</h3><table style="border-collapse: collapse; width: 100%;">'
        + header
        + body
        + "</table>"
        + totals
    )


def render_ticket_summary(ticket: SupportTicket) -> tuple[str, str]:
    """Build the ``(subject, html)`` pair for the support email."""
    label = ticket_label(ticket)
    subject = f"[Support] {label} {ticket.id}: {ticket.customer.name}"

    detail = _help_block(ticket) if is_help(ticket) else _location_block(ticket)
    html = (
        '<div style="font-family: -apple-system, BlinkMacSystemFont, \'Segoe UI\', Roboto, sans-serif; '
        'max-width: 640px;">'
        f"<h2>{esc(label)} &middot; {esc(ticket.id)}</h2>"
        f'<p style="color: #6b7280;">Created {esc(ticket.created_at.isoformat())}</p>'
        + _customer_block(ticket)
        + detail
        + _cart_block(ticket.cart)
        + "</div>"
    )
    return subject, html


def render_whatsapp_values(ticket: SupportTicket) -> list[str]:
    """Plain-text body values for the WhatsApp alert template."""
    if is_help(ticket):
        topic = ticket.help.topic if ticket.help and ticket.help.topic else ticket.reason
        detail = topic or "-"
    else:
        detail = f"{ticket.pincode or '-'} ({format_km(ticket.distance_km)} / {format_km(ticket.max_km)})"
    return [
        ticket.id,
        ticket.customer.name,
        ticket_label(ticket),
        detail,
        ticket.customer.contact,
    ]
