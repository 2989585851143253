import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from cafe.database import get_session
from cafe.repositories.menu_repo import MenuRepository
from cafe.schemas.menu import (
    AddonRead,
    CategoryRead,
    CategoryWithItemsRead,
    MenuItemRead,
)
from cafe.services.menu_service import MenuService

router = APIRouter(tags=["Menu"])

repo = MenuRepository()
service = MenuService(repo)


@router.get("/categories", response_model=list[CategoryRead])
def list_categories(session: Session = Depends(get_session)):
    """
    List menu categories, ordered by name (home page).
    """
    return service.list_categories(session)


@router.get("/categories/{slug}", response_model=CategoryWithItemsRead)
def get_category(slug: str, session: Session = Depends(get_session)):
    """
    Category detail page: only available items, ordered by name.
    """
    return service.get_category_with_items(session, slug)


@router.get("/addons", response_model=list[AddonRead])
def list_addons(session: Session = Depends(get_session)):
    return service.list_addons(session)


@router.get("/menu-items/{item_id}", response_model=MenuItemRead)
def get_menu_item(item_id: uuid.UUID, session: Session = Depends(get_session)):
    return service.get_item(session, item_id)
