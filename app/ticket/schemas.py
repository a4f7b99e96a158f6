# app/ticket/schemas.py
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TicketType(str, Enum):
    OUT_OF_ZONE = "out_of_zone"
    MANUAL_SUPPORT = "manual_support"


class ChannelStatus(str, Enum):
    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"


class _Payload(BaseModel):
    # storefront clients send extra keys now and then; drop them
    model_config = ConfigDict(extra="ignore")


class Address(_Payload):
    line1: str
    line2: str | None = None
    landmark: str | None = None
    city: str
    address_type: str | None = None


class Customer(_Payload):
    name: str
    whatsapp: str
    contact: str
    address: Address


class CartItem(_Payload):
    name: str
    qty: float = 0
    price: float | None = None
    amount: float | None = None


class Cart(_Payload):
    items: list[CartItem] = Field(default_factory=list)
    subtotal: float | None = None
    discount: float | None = None
    payable: float | None = None


class HelpRequest(_Payload):
    topic: str = ""
    order_id: str = ""
    message: str = ""


class TicketBase(_Payload):
    type: TicketType
    reason: str = ""
    distance_km: float | None = None
    max_km: float | None = None
    pincode: str | None = None
    customer: Customer
    cart: Cart | None = None
    help: HelpRequest | None = None


class TicketCreate(TicketBase):
    id: str | None = Field(default=None, max_length=64)


class SupportTicket(TicketBase):
    id: str
    created_at: datetime


class TicketSubmitted(BaseModel):
    ok: bool = True
    status: str
    id: str


class NotifyRequest(_Payload):
    id: str = Field(..., min_length=1)
    email: str | None = None
    whatsapp: str | None = None


class NotifyResult(BaseModel):
    ok: bool = True
    id: str
    email: ChannelStatus = ChannelStatus.SKIPPED
    whatsapp: ChannelStatus = ChannelStatus.SKIPPED


class TicketPage(BaseModel):
    count: int
    tickets: list[SupportTicket]
