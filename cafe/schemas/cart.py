import uuid

from pydantic import field_validator
from sqlmodel import SQLModel, Field


class CartAddon(SQLModel):
    """
    Add-on selected for a cart line item.

    `id` is the catalog add-on id; the add-on has no identity of its own
    inside the cart.
    """

    id: uuid.UUID
    name: str
    price: float = Field(ge=0)
    quantity: int = Field(default=1, gt=0)


class CartLineItemCreate(SQLModel):
    """
    Payload for adding a customized product to the cart.
    The line-item id is generated by the cart.
    """

    menu_item_id: uuid.UUID
    name: str
    image: str = ""
    base_price: float = Field(ge=0)
    quantity: int = Field(default=1, gt=0)
    addons: list[CartAddon] = Field(default_factory=list)
    notes: str | None = None

    @field_validator("notes")
    @classmethod
    def normalize_notes(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class CartLineItem(CartLineItemCreate):
    """
    One entry of the cart, as stored in the snapshot.
    """

    id: str


class CartLineItemRead(CartLineItem):
    line_total: float


class CartQuantityUpdate(SQLModel):
    """
    Payload for changing a line item's quantity.
    Zero or a negative number removes the line item.
    """

    quantity: int


class CartSummary(SQLModel):
    """
    Full cart response model with totals.
    """

    items: list[CartLineItemRead]
    total_items: int
    total_amount: float
