import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class CategoryRead(SQLModel):
    id: uuid.UUID
    name: str
    slug: str
    image_url: str | None = None


class MenuItemRead(SQLModel):
    """
    Menu item representation for clients.
    """

    id: uuid.UUID
    category_id: uuid.UUID
    name: str
    description: str | None = None
    base_price: float
    image_url: str | None = None
    is_available: bool
    created_at: datetime


class CategoryWithItemsRead(CategoryRead):
    """
    Category detail page: the category and its orderable items.
    """

    items: list[MenuItemRead]


class AddonRead(SQLModel):
    id: uuid.UUID
    name: str
    price: float


class MenuItemCreate(SQLModel):
    """
    Admin payload for creating a menu item.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    description: str | None = None
    base_price: float = Field(gt=0)
    category_id: uuid.UUID
    image_url: str | None = None
    is_available: bool = True

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("description", "image_url")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class MenuItemUpdate(SQLModel):
    """
    Partial update payload; omitted fields are left unchanged.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    description: str | None = None
    base_price: float | None = Field(default=None, gt=0)
    category_id: uuid.UUID | None = None
    image_url: str | None = None
    is_available: bool | None = None

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class MenuResetResult(SQLModel):
    categories: int
    menu_items: int
    addons: int
