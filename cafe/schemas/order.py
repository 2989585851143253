import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel

OrderType = Literal["dine-in", "takeout"]
PaymentMethod = Literal["cash", "gcash"]
OrderStatus = Literal["pending", "accepted", "preparing", "ready", "served", "cancelled"]


class CheckoutRequest(SQLModel):
    """
    Payload for placing an order from the current cart.

    Customer provides:
      - customer_name, customer_phone
      - order_type (dine-in | takeout)
      - payment_method (cash | gcash)

    Backend derives:
      - status = 'pending'
      - total_amount from the cart
      - items and add-ons from the cart
    """

    model_config = ConfigDict(extra="forbid")

    customer_name: str
    customer_phone: str
    order_type: OrderType = "dine-in"
    payment_method: PaymentMethod = "cash"

    @field_validator("customer_name", "customer_phone")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class CheckoutResult(SQLModel):
    order_id: uuid.UUID
    order_number: str
    status: OrderStatus
    total_amount: float


class OrderRead(SQLModel):
    """
    Lightweight representation of an order (without items).
    """

    id: uuid.UUID
    order_number: str
    customer_name: str
    customer_phone: str
    order_type: OrderType
    payment_method: PaymentMethod
    status: OrderStatus
    total_amount: float
    created_at: datetime


class OrderItemAddonRead(SQLModel):
    addon_id: uuid.UUID
    name: str
    quantity: int
    price: float


class OrderItemRead(SQLModel):
    """
    Representation of a single order line item.
    """

    id: uuid.UUID
    menu_item_id: uuid.UUID
    name: str
    quantity: int
    unit_price: float
    subtotal: float
    notes: str | None = None
    addons: list[OrderItemAddonRead]


class OrderWithItemsRead(OrderRead):
    """
    Full order view including items.
    """

    items: list[OrderItemRead]


class OrderStatusStep(SQLModel):
    key: OrderStatus
    label: str


class OrderTrackingRead(OrderWithItemsRead):
    """
    Tracking page payload: the order plus its progress through the
    status steps. current_step is -1 for cancelled orders.
    """

    steps: list[OrderStatusStep]
    current_step: int


class BaristaBoard(SQLModel):
    preparing: list[OrderWithItemsRead]
    ready: list[OrderWithItemsRead]
