import uuid

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from cafe.models.menu import Addon, Category, MenuItem
from cafe.repositories.menu_repo import MenuRepository
from cafe.schemas.menu import (
    CategoryWithItemsRead,
    MenuItemCreate,
    MenuItemRead,
    MenuItemUpdate,
    MenuResetResult,
)


# --- Default catalog (used by the admin "reset menu" action) ---

DEFAULT_CATEGORIES: list[dict] = [
    {
        "name": "Coffee",
        "slug": "coffee",
        "image_url": "https://images.unsplash.com/photo-1511920170033-f8396924c348?w=400",
    },
    {
        "name": "Non Coffee",
        "slug": "non-coffee",
        "image_url": "https://images.unsplash.com/photo-1556679343-c7306c1976bc?w=400",
    },
    {
        "name": "Fruit Sodas",
        "slug": "fruit-sodas",
        "image_url": "https://images.unsplash.com/photo-1546173159-315724a31696?w=400",
    },
]

# (category slug, name, description, base price)
DEFAULT_MENU_ITEMS: list[tuple[str, str, str, float]] = [
    ("coffee", "Cafe Latte", "Daily: ₱70 | Extra: ₱90 | Hot: ₱60", 70),
    ("coffee", "Caramel Macchiato", "Daily: ₱70 | Extra: ₱90 | Hot: ₱60", 70),
    ("coffee", "Salted Caramel", "Daily: ₱70 | Extra: ₱90 | Hot: ₱60", 70),
    ("coffee", "Hazelnut", "Daily: ₱70 | Extra: ₱90 | Hot: ₱60", 70),
    ("coffee", "Mocha", "Daily: ₱70 | Extra: ₱90 | Hot: ₱60", 70),
    ("coffee", "White Mocha", "Daily: ₱70 | Extra: ₱90 | Hot: ₱60", 70),
    ("coffee", "Spanish", "Daily: ₱70 | Extra: ₱90 | Hot: ₱60", 70),
    ("coffee", "French Vanilla", "Daily: ₱70 | Extra: ₱90 | Hot: ₱60", 70),
    ("coffee", "Iced Americano", "Daily: ₱70 | Extra: ₱90 | Hot: ₱60", 70),
    ("coffee", "White Chocolate", "Daily: ₱70 | Extra: ₱90 | Hot: ₱60", 70),
    ("coffee", "Biscoff Latte", "Daily: ₱80 | Extra: ₱99", 80),
    ("coffee", "Dirty Matcha", "Daily: ₱80 | Extra: ₱99", 80),
    ("coffee", "Klaséco Coffee", "Daily: ₱80 | Extra: ₱99", 80),
    ("non-coffee", "Matcha Latte", "Daily: ₱70 | Extra: ₱90", 70),
    ("non-coffee", "Blueberry Latte", "Daily: ₱70 | Extra: ₱90", 70),
    ("non-coffee", "Strawberry Latte", "Daily: ₱70 | Extra: ₱90", 70),
    ("non-coffee", "Oreo Cream", "Daily: ₱70 | Extra: ₱90", 70),
    ("non-coffee", "Milo Dinosaur", "Daily: ₱70 | Extra: ₱90", 70),
    ("non-coffee", "Milky Biscoff", "Daily: ₱70 | Extra: ₱90", 70),
    ("non-coffee", "Milky Choco", "Daily: ₱70 | Extra: ₱90", 70),
    ("non-coffee", "Matcha Oreo", "Daily: ₱80 | Extra: ₱99", 80),
    ("non-coffee", "Matcha Biscoff", "Daily: ₱80 | Extra: ₱99", 80),
    ("non-coffee", "Matcha Caramel", "Daily: ₱80 | Extra: ₱99", 80),
    ("non-coffee", "Blueberry Matcha", "Daily: ₱80 | Extra: ₱99", 80),
    ("non-coffee", "Strawberry Matcha", "Daily: ₱80 | Extra: ₱99", 80),
    ("non-coffee", "Strawberry Oreo", "Daily: ₱80 | Extra: ₱99", 80),
    ("fruit-sodas", "Lychee", "Extra: ₱60", 60),
    ("fruit-sodas", "Blueberry", "Extra: ₱60", 60),
    ("fruit-sodas", "Green Apple", "Extra: ₱60", 60),
    ("fruit-sodas", "Strawberry", "Extra: ₱60", 60),
    ("fruit-sodas", "Four Seasons", "Extra: ₱60", 60),
    ("fruit-sodas", "Blue Lemonade", "Extra: ₱60", 60),
    ("fruit-sodas", "Purple Soda", "Extra: ₱70", 70),
    ("fruit-sodas", "Purple Strawberry", "Extra: ₱70", 70),
]

DEFAULT_ADDONS: list[tuple[str, float]] = [
    ("Nata", 10),
    ("Oreo", 15),
    ("Biscoff", 15),
    ("Espresso Shot", 20),
]


class MenuService:
    """
    Business logic for the menu.

    Responsibilities:
      - storefront reads (categories, category detail, add-ons)
      - admin CRUD on menu items (enforced at router via require_staff)
      - resetting the catalog to the café's default menu
    """

    def __init__(self, repo: MenuRepository):
        self.repo = repo

    # ----- Helpers -----

    def _get_item_or_404(self, session: Session, item_id: uuid.UUID) -> MenuItem:
        item = self.repo.get_item(session, item_id)
        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Menu item not found",
            )
        return item

    def _ensure_category(self, session: Session, category_id: uuid.UUID) -> None:
        if self.repo.get_category(session, category_id) is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Category does not exist",
            )

    # ----- Storefront -----

    def list_categories(self, session: Session) -> list[Category]:
        return self.repo.list_categories(session)

    def get_category_with_items(self, session: Session, slug: str) -> CategoryWithItemsRead:
        category = self.repo.get_category_by_slug(session, slug)
        if not category:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Category not found",
            )
        items = self.repo.list_items(session, category_id=category.id, only_available=True)
        return CategoryWithItemsRead(
            id=category.id,
            name=category.name,
            slug=category.slug,
            image_url=category.image_url,
            items=[MenuItemRead.model_validate(item) for item in items],
        )

    def list_addons(self, session: Session) -> list[Addon]:
        return self.repo.list_addons(session)

    def get_item(self, session: Session, item_id: uuid.UUID) -> MenuItem:
        return self._get_item_or_404(session, item_id)

    # ----- Admin -----

    def list_items(
        self,
        session: Session,
        category_id: uuid.UUID | None = None,
    ) -> list[MenuItem]:
        return self.repo.list_items(session, category_id=category_id)

    def create_item(self, session: Session, payload: MenuItemCreate) -> MenuItem:
        self._ensure_category(session, payload.category_id)
        item = MenuItem(**payload.model_dump())
        return self.repo.save_item(session, item)

    def update_item(
        self,
        session: Session,
        item_id: uuid.UUID,
        payload: MenuItemUpdate,
    ) -> MenuItem:
        item = self._get_item_or_404(session, item_id)
        data = payload.model_dump(exclude_unset=True)

        if data.get("category_id") is not None:
            self._ensure_category(session, data["category_id"])

        for key, value in data.items():
            if key in ("description", "image_url"):
                value = (value or "").strip() or None
            elif value is None:
                continue
            setattr(item, key, value)

        return self.repo.save_item(session, item)

    def toggle_availability(self, session: Session, item_id: uuid.UUID) -> MenuItem:
        item = self._get_item_or_404(session, item_id)
        item.is_available = not item.is_available
        return self.repo.save_item(session, item)

    def delete_item(self, session: Session, item_id: uuid.UUID) -> None:
        item = self._get_item_or_404(session, item_id)
        try:
            self.repo.delete_item(session, item)
        except IntegrityError:
            session.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Menu item is referenced by existing orders",
            )

    def reset_default_menu(self, session: Session) -> MenuResetResult:
        """
        Replace the catalog with the café's default menu.

        Steps:
          1. Delete menu items and add-ons.
          2. Drop categories that are not part of the default menu.
          3. Upsert default categories by slug (existing ids are kept).
          4. Insert default menu items and add-ons.
          5. Commit once.

        Fails with 409 if existing orders still reference the old menu;
        clear the order history first.
        """
        try:
            self.repo.delete_all_items(session)
            self.repo.delete_all_addons(session)
            self.repo.delete_categories_except(
                session, [c["slug"] for c in DEFAULT_CATEGORIES]
            )

            category_ids: dict[str, uuid.UUID] = {}
            for data in DEFAULT_CATEGORIES:
                category = self.repo.get_category_by_slug(session, data["slug"])
                if category is None:
                    category = Category(**data)
                else:
                    category.name = data["name"]
                    category.image_url = data["image_url"]
                self.repo.add_all(session, [category])
                category_ids[data["slug"]] = category.id

            items = [
                MenuItem(
                    category_id=category_ids[slug],
                    name=name,
                    description=description,
                    base_price=price,
                )
                for slug, name, description, price in DEFAULT_MENU_ITEMS
            ]
            addons = [Addon(name=name, price=price) for name, price in DEFAULT_ADDONS]
            self.repo.add_all(session, items)
            self.repo.add_all(session, addons)
            session.commit()
        except IntegrityError:
            session.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Existing orders reference the current menu; clear order history first",
            )

        return MenuResetResult(
            categories=len(DEFAULT_CATEGORIES),
            menu_items=len(items),
            addons=len(addons),
        )
