import uuid


def test_health(client):
    res = client.get("/")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


def test_list_categories_ordered_by_name(client, menu):
    res = client.get("/api/v1/categories")

    assert res.status_code == 200
    assert [c["slug"] for c in res.json()] == ["coffee", "fruit-sodas"]


def test_category_detail_lists_available_items_only(client, menu):
    res = client.get("/api/v1/categories/coffee")

    assert res.status_code == 200
    body = res.json()
    assert body["name"] == "Coffee"
    assert [i["name"] for i in body["items"]] == ["Biscoff Latte", "Cafe Latte"]
    assert all(i["is_available"] for i in body["items"])


def test_unknown_category_is_404(client, menu):
    res = client.get("/api/v1/categories/pastries")

    assert res.status_code == 404
    assert res.json()["detail"] == "Category not found"


def test_list_addons(client, menu):
    res = client.get("/api/v1/addons")

    assert res.status_code == 200
    assert [(a["name"], a["price"]) for a in res.json()] == [
        ("Espresso Shot", 20.0),
        ("Nata", 10.0),
    ]


def test_get_menu_item(client, menu):
    res = client.get(f"/api/v1/menu-items/{menu['latte'].id}")

    assert res.status_code == 200
    assert res.json()["base_price"] == 70.0


def test_get_menu_item_404(client, menu):
    res = client.get(f"/api/v1/menu-items/{uuid.uuid4()}")
    assert res.status_code == 404
