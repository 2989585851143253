import uuid

from sqlmodel import Session, select

from cafe.models.menu import Addon, Category, MenuItem


class MenuRepository:
    """
    Data access layer for categories, menu items and add-ons.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    # ----- Categories -----

    def list_categories(self, session: Session) -> list[Category]:
        stmt = select(Category).order_by(Category.name)
        return session.exec(stmt).all()

    def get_category_by_slug(self, session: Session, slug: str) -> Category | None:
        stmt = select(Category).where(Category.slug == slug)
        return session.exec(stmt).first()

    def get_category(self, session: Session, category_id: uuid.UUID) -> Category | None:
        return session.get(Category, category_id)

    # ----- Menu items -----

    def list_items(
        self,
        session: Session,
        category_id: uuid.UUID | None = None,
        only_available: bool = False,
    ) -> list[MenuItem]:
        stmt = select(MenuItem)
        if category_id is not None:
            stmt = stmt.where(MenuItem.category_id == category_id)
        if only_available:
            stmt = stmt.where(MenuItem.is_available == True)  # noqa: E712
        stmt = stmt.order_by(MenuItem.name)
        return session.exec(stmt).all()

    def get_item(self, session: Session, item_id: uuid.UUID) -> MenuItem | None:
        return session.get(MenuItem, item_id)

    def save_item(self, session: Session, item: MenuItem) -> MenuItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def delete_item(self, session: Session, item: MenuItem) -> None:
        session.delete(item)
        session.commit()

    # ----- Add-ons -----

    def get_addon(self, session: Session, addon_id: uuid.UUID) -> Addon | None:
        return session.get(Addon, addon_id)

    def list_addons(self, session: Session) -> list[Addon]:
        stmt = select(Addon).order_by(Addon.name)
        return session.exec(stmt).all()

    # ----- Bulk catalog replacement -----
    # No commits here; the caller commits once the whole catalog is written.

    def delete_all_items(self, session: Session) -> None:
        for row in session.exec(select(MenuItem)).all():
            session.delete(row)
        session.flush()

    def delete_all_addons(self, session: Session) -> None:
        for row in session.exec(select(Addon)).all():
            session.delete(row)
        session.flush()

    def delete_categories_except(self, session: Session, slugs: list[str]) -> None:
        stmt = select(Category).where(Category.slug.not_in(slugs))
        for row in session.exec(stmt).all():
            session.delete(row)
        session.flush()

    def add_all(self, session: Session, rows: list) -> None:
        session.add_all(rows)
        session.flush()
