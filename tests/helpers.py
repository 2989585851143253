from cafe.models.menu import MenuItem


def line_payload(item: MenuItem, quantity: int = 1, addons=(), notes=None) -> dict:
    """Cart line payload for a catalog item, as the storefront would send it."""
    return {
        "menu_item_id": str(item.id),
        "name": item.name,
        "image": item.image_url or "",
        "base_price": item.base_price,
        "quantity": quantity,
        "addons": [
            {"id": str(a.id), "name": a.name, "price": a.price, "quantity": 1}
            for a in addons
        ],
        "notes": notes,
    }
