import io

import pytest
from fastapi.testclient import TestClient
from pytest_bdd import when, then, parsers, scenarios

from app.api.product_routes import get_storage
from app.core.db import SessionLocal
from app.infra.storage.local import LocalFileStorage
from app.main import app
from app.repositories.product_repositories import ProductRepository
from common_steps import *

scenarios("../features/products.feature")


@pytest.fixture
def client(tmp_path):
    app.dependency_overrides[get_storage] = lambda: LocalFileStorage(base_dir=str(tmp_path))
    yield TestClient(app)
    app.dependency_overrides.clear()


def _product_form(name, price, stock):
    return {"name": name, "price": str(price), "stockQuantity": str(stock)}


@when("I list the products")
def step_list(client, scenario_data):
    scenario_data["response"] = client.get("/api/products")


@when(parsers.parse("I read the product with id {product_id:d}"))
def step_read(client, scenario_data, product_id):
    scenario_data["response"] = client.get(f"/api/products/{product_id}")


@when(parsers.parse('I create a product "{name}" priced {price:f} with stock {stock:d}'))
def step_create(client, scenario_data, name, price, stock):
    scenario_data["response"] = client.post(
        "/api/products", data=_product_form(name, price, stock), headers=auth_headers(scenario_data)
    )


@when(parsers.parse('I create a product "{name}" priced {price:f} with stock {stock:d} and image "{image}"'))
def step_create_with_image(client, scenario_data, name, price, stock, image):
    scenario_data["response"] = client.post(
        "/api/products",
        data=_product_form(name, price, stock),
        files={"imageFile": (image, io.BytesIO(b"\x89PNG\r\n\x1a\n"), "image/png")},
        headers=auth_headers(scenario_data),
    )


@when(parsers.parse('I create a product "{name}" priced {price:f} with stock {stock:d} without a token'))
def step_create_anonymous(client, scenario_data, name, price, stock):
    scenario_data["response"] = client.post("/api/products", data=_product_form(name, price, stock))


@when(parsers.parse('I change the price of "{name}" to {price:f}'))
def step_update_price(client, scenario_data, name, price):
    product_id = scenario_data["products"][name]
    scenario_data["response"] = client.put(
        f"/api/products/{product_id}", data={"price": str(price)}, headers=auth_headers(scenario_data)
    )


@when(parsers.parse('I delete the product "{name}"'))
def step_delete(client, scenario_data, name):
    product_id = scenario_data["products"][name]
    scenario_data["response"] = client.delete(f"/api/products/{product_id}", headers=auth_headers(scenario_data))


@when("I request the product statistics")
def step_stats(client, scenario_data):
    scenario_data["response"] = client.get("/api/products/stats")


@then(parsers.parse('the catalog should contain "{name}"'))
def step_catalog_contains(scenario_data, name):
    body = scenario_data["response"].json()
    assert name in [p["name"] for p in body["products"]]
    assert body["count"] == len(body["products"])


@then(parsers.parse('the created product should be named "{name}"'))
def step_created_name(scenario_data, name):
    product = scenario_data["response"].json()["product"]
    assert product["name"] == name
    assert product["in_stock"] is True


@then("the created product should have an image")
def step_created_image(scenario_data):
    image_name = scenario_data["response"].json()["product"]["image_name"]
    assert image_name
    assert image_name.endswith(".png")


@then(parsers.parse('the product "{name}" should cost {price:f}'))
def step_product_price(scenario_data, name, price):
    with SessionLocal() as db:
        product = ProductRepository(db).get(scenario_data["products"][name])
        assert product.price == pytest.approx(price)
        assert product.name == name


@then(parsers.parse('the product "{name}" should no longer exist'))
def step_product_gone(scenario_data, name):
    with SessionLocal() as db:
        assert ProductRepository(db).get(scenario_data["products"][name]) is None


@then(parsers.parse("the statistics should report {total:d} products with {in_stock:d} in stock"))
def step_stats_values(scenario_data, total, in_stock):
    body = scenario_data["response"].json()
    assert body["total_products"] == total
    assert body["in_stock_products"] == in_stock
    assert body["average_price"] == pytest.approx(15.0)
