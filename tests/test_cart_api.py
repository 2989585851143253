import json

from fastapi.testclient import TestClient

from cafe.core.cart_session import CART_COOKIE
from cafe.main import app
from helpers import line_payload


def test_first_visit_gets_empty_cart_and_cookie(client):
    res = client.get("/api/v1/cart")

    assert res.status_code == 200
    assert res.json() == {"items": [], "total_items": 0, "total_amount": 0.0}
    assert CART_COOKIE in res.cookies


def test_add_update_remove_flow(client, menu):
    res = client.post(
        "/api/v1/cart/items",
        json=line_payload(menu["latte"], addons=[menu["nata"]], notes="  less ice "),
    )
    assert res.status_code == 201
    body = res.json()
    assert body["total_items"] == 1
    assert body["total_amount"] == 80.0
    latte_line = body["items"][0]
    assert latte_line["line_total"] == 80.0
    assert latte_line["notes"] == "less ice"

    res = client.post("/api/v1/cart/items", json=line_payload(menu["lychee"], quantity=2))
    body = res.json()
    assert body["total_items"] == 3
    assert body["total_amount"] == 200.0
    lychee_line = body["items"][1]

    res = client.patch(f"/api/v1/cart/items/{lychee_line['id']}", json={"quantity": 3})
    assert res.json()["total_amount"] == 260.0

    res = client.patch(f"/api/v1/cart/items/{latte_line['id']}", json={"quantity": 0})
    body = res.json()
    assert [i["id"] for i in body["items"]] == [lychee_line["id"]]
    assert body["total_amount"] == 180.0

    res = client.delete(f"/api/v1/cart/items/{lychee_line['id']}")
    assert res.json()["items"] == []


def test_same_product_twice_is_two_lines(client, menu):
    client.post("/api/v1/cart/items", json=line_payload(menu["latte"]))
    res = client.post("/api/v1/cart/items", json=line_payload(menu["latte"]))

    ids = [i["id"] for i in res.json()["items"]]
    assert len(ids) == 2
    assert ids[0] != ids[1]


def test_unknown_line_id_leaves_cart_unchanged(client, menu):
    before = client.post("/api/v1/cart/items", json=line_payload(menu["latte"])).json()

    res = client.patch("/api/v1/cart/items/does-not-exist", json={"quantity": 4})

    assert res.status_code == 200
    assert res.json() == before


def test_clear_cart(client, menu):
    client.post("/api/v1/cart/items", json=line_payload(menu["latte"]))

    res = client.delete("/api/v1/cart")
    assert res.json()["total_items"] == 0
    # clearing again is harmless
    assert client.delete("/api/v1/cart").json()["total_items"] == 0


def test_cart_is_persisted_per_session(client, menu, cart_storages):
    client.post("/api/v1/cart/items", json=line_payload(menu["latte"], quantity=2))

    session_id = client.cookies.get(CART_COOKIE)
    snapshot = json.loads(cart_storages[session_id].data["klaseco-cart"])
    assert snapshot[0]["name"] == "Cafe Latte"
    assert snapshot[0]["quantity"] == 2


def test_carts_are_isolated_between_clients(client, menu):
    client.post("/api/v1/cart/items", json=line_payload(menu["latte"]))

    other = TestClient(app)
    res = other.get("/api/v1/cart")

    assert res.json()["items"] == []
    assert client.get("/api/v1/cart").json()["total_items"] == 1


def test_invalid_cookie_gets_replaced(client):
    client.cookies.set(CART_COOKIE, "../../not-a-uuid")

    res = client.get("/api/v1/cart")

    assert res.status_code == 200
    assert res.cookies.get(CART_COOKIE) != "../../not-a-uuid"


def test_invalid_payload_is_422(client, menu):
    payload = line_payload(menu["latte"])
    payload["quantity"] = 0
    assert client.post("/api/v1/cart/items", json=payload).status_code == 422

    payload = line_payload(menu["latte"])
    payload["base_price"] = -5
    assert client.post("/api/v1/cart/items", json=payload).status_code == 422
