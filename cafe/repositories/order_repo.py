import uuid
from collections.abc import Iterable

from sqlmodel import Session, select

from cafe.models.menu import Addon, MenuItem
from cafe.models.order import Order, OrderItem, OrderItemAddon


class OrderRepository:
    """
    Data access layer for orders, order_items and order_item_addons.

    NOTE:
      - Checkout is a multi-step transaction, so the create_* methods
        only flush. The service is responsible for session.commit().
    """

    # ---- Orders ----

    def get_by_id(self, session: Session, order_id: uuid.UUID) -> Order | None:
        return session.get(Order, order_id)

    def list_by_status(
        self,
        session: Session,
        statuses: Iterable[str],
    ) -> list[Order]:
        """Orders in any of `statuses`, oldest first (queue order)."""
        stmt = (
            select(Order)
            .where(Order.status.in_(list(statuses)))
            .order_by(Order.created_at)
        )
        return session.exec(stmt).all()

    def list_recent(self, session: Session, limit: int = 100) -> list[Order]:
        stmt = select(Order).order_by(Order.created_at.desc()).limit(limit)
        return session.exec(stmt).all()

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing, but ensure id is populated.
        """
        session.add(order)
        session.flush()
        session.refresh(order)
        return order

    def set_status(self, session: Session, order: Order, status: str) -> Order:
        order.status = status
        session.add(order)
        session.commit()
        session.refresh(order)
        return order

    def delete_with_statuses(self, session: Session, statuses: Iterable[str]) -> int:
        """
        Delete orders in `statuses` together with their items and add-ons.

        Returns the number of deleted orders.
        """
        orders = self.list_by_status(session, statuses)
        if not orders:
            return 0

        order_ids = [o.id for o in orders]
        items = session.exec(
            select(OrderItem).where(OrderItem.order_id.in_(order_ids))
        ).all()
        item_ids = [it.id for it in items]
        if item_ids:
            addons = session.exec(
                select(OrderItemAddon).where(OrderItemAddon.order_item_id.in_(item_ids))
            ).all()
            for row in addons:
                session.delete(row)
            session.flush()
        for row in items:
            session.delete(row)
        session.flush()
        for row in orders:
            session.delete(row)
        session.commit()
        return len(orders)

    # ---- Order items ----

    def create_item(self, session: Session, item: OrderItem) -> OrderItem:
        session.add(item)
        session.flush()
        session.refresh(item)
        return item

    def create_item_addons(
        self,
        session: Session,
        addons: list[OrderItemAddon],
    ) -> list[OrderItemAddon]:
        session.add_all(addons)
        session.flush()
        return addons

    def list_items_with_names(
        self,
        session: Session,
        order_ids: list[uuid.UUID],
    ) -> list[tuple[OrderItem, str]]:
        """(OrderItem, menu item name) rows for the given orders."""
        if not order_ids:
            return []
        stmt = (
            select(OrderItem, MenuItem.name)
            .join(MenuItem, MenuItem.id == OrderItem.menu_item_id)
            .where(OrderItem.order_id.in_(order_ids))
        )
        return list(session.exec(stmt).all())

    def list_item_addons_with_names(
        self,
        session: Session,
        item_ids: list[uuid.UUID],
    ) -> list[tuple[OrderItemAddon, str]]:
        """(OrderItemAddon, add-on name) rows for the given order items."""
        if not item_ids:
            return []
        stmt = (
            select(OrderItemAddon, Addon.name)
            .join(Addon, Addon.id == OrderItemAddon.addon_id)
            .where(OrderItemAddon.order_item_id.in_(item_ids))
        )
        return list(session.exec(stmt).all())
