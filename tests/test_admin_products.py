from sqlmodel import select

from shopapi.models.order import OrderItem
from shopapi.models.product import Product, ProductVariant


def test_create_then_get_round_trip(client, admin_headers):
    payload = {
        "name": "Rain Jacket",
        "description": "Waterproof shell",
        "price": 4999,
        "image": "https://cdn.example.com/jacket.png",
    }
    created = client.post("/admin/products", json=payload, headers=admin_headers)
    assert created.status_code == 201
    assert created.json()["variants"] == []

    product_id = created.json()["id"]
    response = client.get(f"/admin/products/{product_id}", headers=admin_headers)
    assert response.status_code == 200

    data = response.json()
    for key, value in payload.items():
        assert data[key] == value
    assert data["variants"] == []


def test_create_requires_name_and_price(client, admin_headers):
    response = client.post("/admin/products", json={"name": "No price"}, headers=admin_headers)
    assert response.status_code == 400

    response = client.post("/admin/products", json={"name": "  ", "price": 10}, headers=admin_headers)
    assert response.status_code == 400


def test_create_rejects_fractional_price(client, admin_headers):
    response = client.post(
        "/admin/products",
        json={"name": "Socks", "price": 9.99},
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_create_forbidden_for_customer(client, customer_headers):
    response = client.post(
        "/admin/products",
        json={"name": "Socks", "price": 999},
        headers=customer_headers,
    )
    assert response.status_code == 403


def test_list_admin_products_newest_first(client, admin_headers):
    for name in ("First", "Second"):
        client.post("/admin/products", json={"name": name, "price": 100}, headers=admin_headers)

    response = client.get("/admin/products", headers=admin_headers)
    assert response.status_code == 200
    assert [p["name"] for p in response.json()] == ["Second", "First"]


def test_update_product_replaces_fields(client, admin_headers, tee):
    product, _, _ = tee
    response = client.put(
        f"/admin/products/{product.id}",
        json={"name": "Premium Tee", "price": 120},
        headers=admin_headers,
    )
    assert response.status_code == 200

    data = response.json()
    assert data["name"] == "Premium Tee"
    assert data["price"] == 120
    assert data["description"] is None
    assert data["image"] is None
    assert len(data["variants"]) == 2


def test_update_missing_product(client, admin_headers):
    response = client.put(
        "/admin/products/404",
        json={"name": "Ghost", "price": 1},
        headers=admin_headers,
    )
    assert response.status_code == 404


def test_delete_product_cascades_to_variants(client, db, admin_headers, tee):
    product, _, _ = tee

    response = client.delete(f"/admin/products/{product.id}", headers=admin_headers)
    assert response.status_code == 204

    assert db.get(Product, product.id) is None
    variants = db.exec(
        select(ProductVariant).where(ProductVariant.product_id == product.id)
    ).all()
    assert variants == []
    assert client.get(f"/products/{product.id}").status_code == 404


def test_delete_product_removes_its_order_items(client, db, admin_headers, tee, paid_order):
    product, _, _ = tee

    client.delete(f"/admin/products/{product.id}", headers=admin_headers)

    items = db.exec(select(OrderItem).where(OrderItem.order_id == paid_order.id)).all()
    assert items == []


def test_delete_missing_product(client, admin_headers):
    response = client.delete("/admin/products/12345", headers=admin_headers)
    assert response.status_code == 404


def test_variant_lifecycle(client, admin_headers, tee):
    product, _, _ = tee

    created = client.post(
        f"/admin/products/{product.id}/variants",
        json={"name": "Red / S", "color": "Red", "size": "S", "price": 130},
        headers=admin_headers,
    )
    assert created.status_code == 201
    variant = created.json()
    assert variant["product_id"] == product.id
    assert variant["stock"] == 0

    updated = client.put(
        f"/admin/products/{product.id}/variants/{variant['id']}",
        json={"name": "Red / S", "color": "Red", "size": "S", "price": 140, "stock": 7},
        headers=admin_headers,
    )
    assert updated.status_code == 200
    assert updated.json()["price"] == 140
    assert updated.json()["stock"] == 7

    deleted = client.delete(
        f"/admin/products/{product.id}/variants/{variant['id']}",
        headers=admin_headers,
    )
    assert deleted.status_code == 204

    remaining = client.get(f"/products/{product.id}").json()["variants"]
    assert variant["id"] not in [v["id"] for v in remaining]


def test_create_variant_for_missing_product(client, admin_headers):
    response = client.post(
        "/admin/products/999/variants",
        json={"name": "X", "price": 1},
        headers=admin_headers,
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Product not found"


def test_variant_must_belong_to_product(client, add, admin_headers, tee):
    _, black, _ = tee
    other = add(Product(name="Other", price=5))

    response = client.put(
        f"/admin/products/{other.id}/variants/{black.id}",
        json={"name": "Hijack", "price": 1},
        headers=admin_headers,
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Variant not found for this product"

    response = client.delete(
        f"/admin/products/{other.id}/variants/{black.id}",
        headers=admin_headers,
    )
    assert response.status_code == 404


def test_deleting_variant_keeps_order_items_with_null_variant(
    client, db, admin_headers, tee, paid_order
):
    product, black, _ = tee

    response = client.delete(
        f"/admin/products/{product.id}/variants/{black.id}",
        headers=admin_headers,
    )
    assert response.status_code == 204

    items = db.exec(
        select(OrderItem).where(OrderItem.order_id == paid_order.id).order_by(OrderItem.id)
    ).all()
    assert len(items) == 2
    assert items[0].variant_id is None
    # Captured price is untouched
    assert items[0].price == 150
