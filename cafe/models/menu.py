import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Category(SQLModel, table=True):
    """
    Menu category shown on the storefront home page.

    Matches the Supabase table:
      - id, name, slug, image_url, created_at
    """

    __tablename__ = "categories"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=100,
        description="Display name of the category",
    )

    slug: str = Field(
        max_length=255,
        unique=True,
        index=True,
        description="URL-friendly identifier (unique)",
    )

    image_url: str | None = Field(
        default=None,
        description="Cover image URL",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class MenuItem(SQLModel, table=True):
    """
    A drink or food item that customers can order.

    Matches the Supabase table:
      - id, category_id, name, description, base_price,
        image_url, is_available, created_at
    """

    __tablename__ = "menu_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    category_id: uuid.UUID = Field(
        foreign_key="categories.id",
        index=True,
    )

    name: str = Field(
        max_length=100,
        index=True,
        description="Display name of the item",
    )

    description: str | None = Field(
        default=None,
        description="Optional description (sizes, prices per size...)",
    )

    base_price: float = Field(
        ge=0,
        description="Unit price before add-ons (PHP)",
    )

    image_url: str | None = Field(
        default=None,
        description="Item image URL",
    )

    is_available: bool = Field(
        default=True,
        index=True,
        description="Whether this item is orderable on the storefront",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class Addon(SQLModel, table=True):
    """
    Paid customization that can be attached to any menu item.
    """

    __tablename__ = "addons"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(max_length=100)

    price: float = Field(ge=0)
