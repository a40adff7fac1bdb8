import pytest

from storefront.products.models import Product
from storefront.products.service import ProductService

PRODUCTS_URL = "/api/v1/products/"

NEW_PRODUCT = {
    "name": "Leather Case",
    "description": "Genuine leather phone case",
    "price": 89.9,
    "stock": 12,
    "category": "cases",
    "color": "brown",
    "model": "Galaxy S24",
    "weight": 0.2,
}


def test_listing_is_public_and_filters_by_category(client, make_product):
    make_product(name="Case A", category="cases")
    make_product(name="Strap B", category="straps")

    response = client.get(PRODUCTS_URL, params={"category": "straps"})

    assert response.status_code == 200
    assert [product["name"] for product in response.json()] == ["Strap B"]


def test_get_single_product(client, make_product):
    case = make_product(name="Case A")

    response = client.get(f"{PRODUCTS_URL}{case.id}")

    assert response.status_code == 200
    assert response.json()["name"] == "Case A"


def test_unknown_product(client):
    response = client.get(f"{PRODUCTS_URL}nope")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "PRODUCT_NOT_FOUND"


def test_admin_creates_product(client, db_session, admin_headers):
    response = client.post(PRODUCTS_URL, json=NEW_PRODUCT, headers=admin_headers)

    assert response.status_code == 201
    created = db_session.get(Product, response.json()["id"])
    assert created.price == 89.9
    assert created.stock == 12


def test_customer_cannot_create_product(client, auth_headers):
    response = client.post(PRODUCTS_URL, json=NEW_PRODUCT, headers=auth_headers)

    assert response.status_code == 403


@pytest.mark.parametrize("field, value", [("price", 0), ("stock", -1), ("name", "")])
def test_create_rejects_invalid_fields(client, admin_headers, field, value):
    response = client.post(PRODUCTS_URL, json={**NEW_PRODUCT, field: value}, headers=admin_headers)

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_admin_partial_update(client, db_session, admin_headers, make_product):
    case = make_product(price=50.0, stock=3)

    response = client.put(f"{PRODUCTS_URL}{case.id}", json={"stock": 7}, headers=admin_headers)

    assert response.status_code == 200
    product = db_session.get(Product, case.id)
    assert product.stock == 7
    assert product.price == 50.0


def test_update_cannot_clear_required_fields(client, admin_headers, make_product):
    case = make_product()

    response = client.put(f"{PRODUCTS_URL}{case.id}", json={"price": None}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["error"]["context"]["fields"] == ["price"]


def test_admin_deletes_product(client, db_session, admin_headers, make_product):
    case = make_product()
    product_id = case.id

    response = client.delete(f"{PRODUCTS_URL}{product_id}", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert db_session.get(Product, product_id) is None


def test_decrement_stock_floors_at_zero(db_session, make_product):
    case = make_product(stock=2)

    assert ProductService.decrement_stock(db_session, case.id, 5) == (2, 0)
    db_session.commit()
    assert db_session.get(Product, case.id).stock == 0


def test_decrement_stock_unknown_product(db_session):
    assert ProductService.decrement_stock(db_session, "missing", 1) is None
