import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Customer order placed from the storefront.

    Matches the Supabase table:
      - id, customer_name, customer_phone, order_type,
        payment_method, status, total_amount, created_at
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    customer_name: str = Field(
        description="Name called out when the order is ready",
    )
    customer_phone: str = Field(
        description="Contact phone number",
    )

    # dine-in | takeout
    order_type: str = Field(
        description="Where the order is consumed",
    )

    # cash | gcash
    payment_method: str = Field(
        description="How the customer pays at the counter",
    )

    # pending | accepted | preparing | ready | served | cancelled
    status: str = Field(
        default="pending",
        index=True,
        description="Order status lifecycle",
    )

    total_amount: float = Field(
        description="Cart total at checkout, add-ons included",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
        description="Creation timestamp (UTC)",
    )


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order.
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    menu_item_id: uuid.UUID = Field(
        foreign_key="menu_items.id",
        index=True,
    )

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    # Base price only; add-on prices live in order_item_addons
    unit_price: float = Field(
        description="Menu item base price at time of order",
    )

    subtotal: float = Field(
        description="unit_price * quantity",
    )

    notes: str | None = Field(
        default=None,
        description="Customer note for the barista",
    )


class OrderItemAddon(SQLModel, table=True):
    """
    Add-on selected for a single order line item.
    """

    __tablename__ = "order_item_addons"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_item_id: uuid.UUID = Field(
        foreign_key="order_items.id",
        index=True,
    )

    addon_id: uuid.UUID = Field(
        foreign_key="addons.id",
        index=True,
    )

    quantity: int = Field(gt=0)

    price: float = Field(
        description="Add-on unit price at time of order",
    )
