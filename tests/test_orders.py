import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from shopapi.models.order import Order, OrderItem
from shopapi.models.product import Product
from shopapi.models.user import User
from shopapi.repositories.order_repo import OrderRepository


def test_create_order_example(client, customer, customer_headers, tee):
    product, _, _ = tee
    response = client.post(
        "/orders",
        json={
            "items": [{"product_id": product.id, "variant_id": None, "quantity": 2}],
            "total": 200,
        },
        headers=customer_headers,
    )
    assert response.status_code == 201

    data = response.json()
    assert data["status"] == "Paid"
    assert data["user_id"] == customer.id
    assert data["total"] == 200
    assert len(data["items"]) == 1
    assert data["items"][0]["quantity"] == 2
    assert data["items"][0]["price"] == product.price
    assert data["items"][0]["variant_id"] is None


def test_variant_id_may_be_omitted(client, customer_headers, tee):
    product, _, _ = tee
    response = client.post(
        "/orders",
        json={"items": [{"product_id": product.id, "quantity": 1}], "total": 100},
        headers=customer_headers,
    )
    assert response.status_code == 201


def test_variant_price_is_captured(client, customer_headers, tee):
    product, black, white = tee
    response = client.post(
        "/orders",
        json={
            "items": [
                {"product_id": product.id, "variant_id": black.id, "quantity": 1},
                {"product_id": product.id, "variant_id": white.id, "quantity": 1},
            ],
            "total": 325,
        },
        headers=customer_headers,
    )
    assert response.status_code == 201
    prices = [item["price"] for item in response.json()["items"]]
    assert prices == [black.price, white.price]
    assert product.price not in prices


def test_unknown_product_creates_nothing(client, db, customer_headers, tee):
    product, _, _ = tee
    response = client.post(
        "/orders",
        json={
            "items": [
                {"product_id": product.id, "variant_id": None, "quantity": 1},
                {"product_id": 9999, "variant_id": None, "quantity": 1},
            ],
            "total": 200,
        },
        headers=customer_headers,
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Product with ID 9999 not found"

    assert db.exec(select(Order)).all() == []
    assert db.exec(select(OrderItem)).all() == []


def test_variant_of_another_product_is_rejected(client, add, customer_headers, tee):
    _, black, _ = tee
    other = add(Product(name="Mug", price=50))

    response = client.post(
        "/orders",
        json={"items": [{"product_id": other.id, "variant_id": black.id, "quantity": 1}], "total": 50},
        headers=customer_headers,
    )
    assert response.status_code == 400
    assert response.json()["detail"] == f"Variant with ID {black.id} not found for product {other.id}"


@pytest.mark.parametrize(
    "payload",
    [
        {"items": [], "total": 100},
        {"total": 100},
        {"items": [{"product_id": 1, "quantity": 1}]},
        {"items": [{"product_id": 1, "quantity": 1}], "total": 0},
        {"items": [{"product_id": 1, "quantity": 1}], "total": -5},
        {"items": [{"product_id": 1, "quantity": 0}], "total": 100},
        {"items": [{"product_id": 1, "quantity": 1.5}], "total": 100},
        {"items": [{"product_id": "1", "quantity": 1}], "total": 100},
        {"items": [{"product_id": 1, "variant_id": "a", "quantity": 1}], "total": 100},
    ],
)
def test_malformed_orders_are_rejected(client, db, customer_headers, tee, payload):
    response = client.post("/orders", json=payload, headers=customer_headers)
    assert response.status_code == 400
    assert db.exec(select(Order)).all() == []


def test_create_order_requires_authentication(client, tee):
    product, _, _ = tee
    response = client.post(
        "/orders",
        json={"items": [{"product_id": product.id, "quantity": 1}], "total": 100},
    )
    assert response.status_code == 401


def test_failed_insert_rolls_back_whole_order(client, db, monkeypatch, customer_headers, tee):
    product, _, _ = tee

    def broken_create_items(self, session, items):
        raise OperationalError("INSERT INTO order_items", {}, Exception("disk I/O error"))

    monkeypatch.setattr(OrderRepository, "create_items", broken_create_items)

    response = client.post(
        "/orders",
        json={"items": [{"product_id": product.id, "quantity": 1}], "total": 100},
        headers=customer_headers,
    )
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to create order. Please try again."

    assert db.exec(select(Order)).all() == []


def test_list_my_orders_only_returns_own_orders(client, add, customer, customer_headers, paid_order, tee):
    product, black, _ = tee
    stranger = add(User(email="other@example.com", role="customer", approved=True))
    add(Order(user_id=stranger.id, total=999, status="Paid"))

    response = client.get("/orders", headers=customer_headers)
    assert response.status_code == 200

    orders = response.json()
    assert [o["id"] for o in orders] == [paid_order.id]

    items = orders[0]["items"]
    assert len(items) == 2
    assert items[0]["product"] == {"id": product.id, "name": product.name, "price": 100, "image": "tee.png"}
    assert items[0]["variant"]["id"] == black.id
    assert items[0]["variant"]["price"] == 150
    assert items[1]["variant"] is None


def test_list_my_orders_newest_first(client, customer_headers, tee):
    product, _, _ = tee
    ids = []
    for total in (100, 200):
        response = client.post(
            "/orders",
            json={"items": [{"product_id": product.id, "quantity": 1}], "total": total},
            headers=customer_headers,
        )
        ids.append(response.json()["id"])

    listed = client.get("/orders", headers=customer_headers).json()
    assert [o["id"] for o in listed] == list(reversed(ids))


def test_item_price_survives_catalog_price_change(client, admin_headers, customer_headers, tee):
    product, _, _ = tee
    client.post(
        "/orders",
        json={"items": [{"product_id": product.id, "quantity": 1}], "total": 100},
        headers=customer_headers,
    )

    client.put(
        f"/admin/products/{product.id}",
        json={"name": product.name, "price": 500},
        headers=admin_headers,
    )

    item = client.get("/orders", headers=customer_headers).json()[0]["items"][0]
    assert item["price"] == 100
    assert item["product"]["price"] == 500
