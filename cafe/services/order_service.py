import logging
import uuid
from collections import defaultdict

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from cafe.models.menu import Addon, MenuItem
from cafe.models.order import Order, OrderItem, OrderItemAddon
from cafe.repositories.menu_repo import MenuRepository
from cafe.repositories.order_repo import OrderRepository
from cafe.schemas.cart import CartLineItem
from cafe.schemas.order import (
    BaristaBoard,
    CheckoutRequest,
    CheckoutResult,
    OrderItemAddonRead,
    OrderItemRead,
    OrderRead,
    OrderStatusStep,
    OrderTrackingRead,
    OrderWithItemsRead,
)
from cafe.services.cart_service import CartStore

logger = logging.getLogger(__name__)

# Linear progression shown on the tracking page
STATUS_STEPS: list[tuple[str, str]] = [
    ("pending", "Order Received"),
    ("accepted", "Confirmed"),
    ("preparing", "Preparing"),
    ("ready", "Ready"),
    ("served", "Served"),
]

# Orders in these states no longer change
FINAL_STATUSES = {"served", "cancelled"}

CASHIER_QUEUE = ["pending"]
BARISTA_QUEUE = ["accepted", "preparing"]
READY_QUEUE = ["ready"]


def order_number(order_id: uuid.UUID) -> str:
    """
    Short customer-facing number derived from the order UUID.

    The first 8 hex digits are folded into the 100000-999999 range.
    """
    head = order_id.hex[:8]
    return str(int(head, 16) % 900000 + 100000)


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Turn the session cart into order / order_items / order_item_addons
      - Price the order from the catalog, not from the cart snapshot
      - Clear the cart once the order is committed
      - Build tracking, cashier and barista views
      - Apply staff status changes (direct writes, no transition checks)
    """

    def __init__(self, order_repo: OrderRepository, menu_repo: MenuRepository):
        self.order_repo = order_repo
        self.menu_repo = menu_repo

    # -------- Customer operations --------

    def checkout(
        self,
        session: Session,
        cart: CartStore,
        payload: CheckoutRequest,
    ) -> CheckoutResult:
        """
        Convert the current cart into an Order.

        Steps:
          1. Reject an empty cart.
          2. For each cart line:
             - Ensure the menu item exists and is available.
             - Ensure every add-on exists.
          3. Create Order row (status='pending', total from catalog prices).
          4. Create one OrderItem per cart line (unit_price = base price).
          5. Create OrderItemAddon rows for each line's add-ons.
          6. Commit transaction.
          7. Clear the cart (only after the commit succeeded).
        """
        items = cart.items
        if not items:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cart is empty",
            )

        menu_items, addons = self._load_catalog(session, items)

        try:
            order = self._insert_order(session, items, payload, menu_items, addons)
        except IntegrityError:
            session.rollback()
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cart contains items that are no longer on the menu",
            )
        cart.clear_cart()

        logger.info("Order %s placed (%d items)", order.id, len(items))
        return CheckoutResult(
            order_id=order.id,
            order_number=order_number(order.id),
            status=order.status,
            total_amount=order.total_amount,
        )

    def _load_catalog(
        self,
        session: Session,
        items: list[CartLineItem],
    ) -> tuple[dict[uuid.UUID, MenuItem], dict[uuid.UUID, Addon]]:
        """
        Look up every menu item and add-on the cart refers to.

        Raises 400 listing each line that cannot be ordered.
        """
        errors: list[dict[str, str]] = []
        menu_items: dict[uuid.UUID, MenuItem] = {}
        addons: dict[uuid.UUID, Addon] = {}

        for line in items:
            menu_item = self.menu_repo.get_item(session, line.menu_item_id)
            if not menu_item:
                errors.append(
                    {
                        "line_id": line.id,
                        "reason": "Menu item not found",
                    }
                )
                continue

            if not menu_item.is_available:
                errors.append(
                    {
                        "line_id": line.id,
                        "reason": f"{menu_item.name} is unavailable",
                    }
                )
                continue

            menu_items[menu_item.id] = menu_item

            for cart_addon in line.addons:
                addon = self.menu_repo.get_addon(session, cart_addon.id)
                if not addon:
                    errors.append(
                        {
                            "line_id": line.id,
                            "reason": f"Add-on {cart_addon.name} not found",
                        }
                    )
                    continue
                addons[addon.id] = addon

        if errors:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"message": "Cart validation failed", "items": errors},
            )
        return menu_items, addons

    def _insert_order(
        self,
        session: Session,
        items: list[CartLineItem],
        payload: CheckoutRequest,
        menu_items: dict[uuid.UUID, MenuItem],
        addons: dict[uuid.UUID, Addon],
    ) -> Order:
        total_amount = 0.0
        for line in items:
            unit_price = menu_items[line.menu_item_id].base_price
            addons_total = sum(addons[a.id].price * a.quantity for a in line.addons)
            total_amount += (unit_price + addons_total) * line.quantity

        order = Order(
            customer_name=payload.customer_name,
            customer_phone=payload.customer_phone,
            order_type=payload.order_type,
            payment_method=payload.payment_method,
            status="pending",
            total_amount=total_amount,
        )
        order = self.order_repo.create_order(session, order)

        for line in items:
            unit_price = menu_items[line.menu_item_id].base_price
            order_item = self.order_repo.create_item(
                session,
                OrderItem(
                    order_id=order.id,
                    menu_item_id=line.menu_item_id,
                    quantity=line.quantity,
                    unit_price=unit_price,
                    subtotal=unit_price * line.quantity,
                    notes=line.notes,
                ),
            )
            if line.addons:
                self.order_repo.create_item_addons(
                    session,
                    [
                        OrderItemAddon(
                            order_item_id=order_item.id,
                            addon_id=addon.id,
                            quantity=addon.quantity,
                            price=addons[addon.id].price,
                        )
                        for addon in line.addons
                    ],
                )

        session.commit()
        session.refresh(order)
        return order

    def track_order(self, session: Session, order_id: uuid.UUID) -> OrderTrackingRead:
        order = self._get_order_or_404(session, order_id)
        full = self._with_items(session, [order])[0]
        keys = [key for key, _ in STATUS_STEPS]
        current = keys.index(order.status) if order.status in keys else -1
        return OrderTrackingRead(
            **full.model_dump(),
            steps=[OrderStatusStep(key=key, label=label) for key, label in STATUS_STEPS],
            current_step=current,
        )

    # -------- Staff operations --------

    def cashier_queue(self, session: Session) -> list[OrderWithItemsRead]:
        orders = self.order_repo.list_by_status(session, CASHIER_QUEUE)
        return self._with_items(session, orders)

    def barista_board(self, session: Session) -> BaristaBoard:
        preparing = self.order_repo.list_by_status(session, BARISTA_QUEUE)
        ready = self.order_repo.list_by_status(session, READY_QUEUE)
        return BaristaBoard(
            preparing=self._with_items(session, preparing),
            ready=self._with_items(session, ready),
        )

    def set_status(self, session: Session, order_id: uuid.UUID, new_status: str) -> OrderRead:
        """
        Move an order to `new_status`.

        Staff buttons only offer the next step, so no transition
        validation happens here.
        """
        order = self._get_order_or_404(session, order_id)
        order = self.order_repo.set_status(session, order, new_status)
        logger.info("Order %s -> %s", order.id, new_status)
        return self._to_read(order)

    # -------- Admin operations --------

    def recent_orders(self, session: Session, limit: int = 100) -> list[OrderRead]:
        return [self._to_read(o) for o in self.order_repo.list_recent(session, limit)]

    def clear_history(self, session: Session) -> int:
        """Delete served and cancelled orders. Returns how many were deleted."""
        return self.order_repo.delete_with_statuses(session, FINAL_STATUSES)

    # -------- Helpers --------

    def _get_order_or_404(self, session: Session, order_id: uuid.UUID) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return order

    @staticmethod
    def _to_read(order: Order) -> OrderRead:
        return OrderRead(
            id=order.id,
            order_number=order_number(order.id),
            customer_name=order.customer_name,
            customer_phone=order.customer_phone,
            order_type=order.order_type,
            payment_method=order.payment_method,
            status=order.status,
            total_amount=order.total_amount,
            created_at=order.created_at,
        )

    def _with_items(self, session: Session, orders: list[Order]) -> list[OrderWithItemsRead]:
        """
        Attach items (with menu item names) and their add-ons to each order,
        keeping the order of `orders`.
        """
        item_rows = self.order_repo.list_items_with_names(session, [o.id for o in orders])
        addon_rows = self.order_repo.list_item_addons_with_names(
            session, [item.id for item, _ in item_rows]
        )

        addons_by_item: dict[uuid.UUID, list[OrderItemAddonRead]] = defaultdict(list)
        for addon, name in addon_rows:
            addons_by_item[addon.order_item_id].append(
                OrderItemAddonRead(
                    addon_id=addon.addon_id,
                    name=name,
                    quantity=addon.quantity,
                    price=addon.price,
                )
            )

        items_by_order: dict[uuid.UUID, list[OrderItemRead]] = defaultdict(list)
        for item, name in item_rows:
            items_by_order[item.order_id].append(
                OrderItemRead(
                    id=item.id,
                    menu_item_id=item.menu_item_id,
                    name=name,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    subtotal=item.subtotal,
                    notes=item.notes,
                    addons=addons_by_item.get(item.id, []),
                )
            )

        return [
            OrderWithItemsRead(
                **self._to_read(order).model_dump(),
                items=items_by_order.get(order.id, []),
            )
            for order in orders
        ]
