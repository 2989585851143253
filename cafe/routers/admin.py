import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from cafe.core.auth import require_staff
from cafe.core.config import get_settings
from cafe.database import get_session
from cafe.repositories.menu_repo import MenuRepository
from cafe.repositories.order_repo import OrderRepository
from cafe.repositories.stats_repo import StatsRepository
from cafe.schemas.menu import (
    MenuItemCreate,
    MenuItemRead,
    MenuItemUpdate,
    MenuResetResult,
)
from cafe.schemas.order import OrderRead
from cafe.schemas.stats import HistoryClearResult, SalesStats
from cafe.services.menu_service import MenuService
from cafe.services.order_service import OrderService
from cafe.services.stats_service import StatsService

settings = get_settings()

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_staff)],
)

menu_service = MenuService(MenuRepository())
order_service = OrderService(OrderRepository(), MenuRepository())
stats_service = StatsService(StatsRepository(), settings.CAFE_UTC_OFFSET_HOURS)


# -------- Menu management --------


@router.get("/menu-items", response_model=list[MenuItemRead])
def list_menu_items(
    category_id: uuid.UUID | None = None,
    session: Session = Depends(get_session),
):
    """
    All menu items (available or not), ordered by name.
    Optional `category_id` filter.
    """
    return menu_service.list_items(session, category_id=category_id)


@router.post(
    "/menu-items",
    response_model=MenuItemRead,
    status_code=status.HTTP_201_CREATED,
)
def create_menu_item(payload: MenuItemCreate, session: Session = Depends(get_session)):
    return menu_service.create_item(session, payload)


@router.patch("/menu-items/{item_id}", response_model=MenuItemRead)
def update_menu_item(
    item_id: uuid.UUID,
    payload: MenuItemUpdate,
    session: Session = Depends(get_session),
):
    return menu_service.update_item(session, item_id, payload)


@router.post("/menu-items/{item_id}/toggle", response_model=MenuItemRead)
def toggle_menu_item(item_id: uuid.UUID, session: Session = Depends(get_session)):
    """
    Flip is_available (hide / show the item on the storefront).
    """
    return menu_service.toggle_availability(session, item_id)


@router.delete("/menu-items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_menu_item(item_id: uuid.UUID, session: Session = Depends(get_session)):
    """
    Delete a menu item. 409 if orders still reference it.
    """
    menu_service.delete_item(session, item_id)
    return None


@router.post("/menu/reset", response_model=MenuResetResult)
def reset_menu(session: Session = Depends(get_session)):
    """
    Replace categories, menu items and add-ons with the default menu.
    """
    return menu_service.reset_default_menu(session)


# -------- Transactions --------


@router.get("/orders", response_model=list[OrderRead])
def list_recent_orders(session: Session = Depends(get_session)):
    """
    Latest 100 orders, newest first (any status).
    """
    return order_service.recent_orders(session)


@router.get("/stats", response_model=SalesStats)
def get_sales_stats(session: Session = Depends(get_session)):
    return stats_service.get_sales_stats(session)


@router.delete("/orders/history", response_model=HistoryClearResult)
def clear_order_history(session: Session = Depends(get_session)):
    """
    Delete served and cancelled orders, with their items and add-ons.
    """
    return HistoryClearResult(deleted_orders=order_service.clear_history(session))
