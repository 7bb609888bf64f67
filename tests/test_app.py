"""Tests for application wiring and error responses."""
from pymongo.errors import ServerSelectionTimeoutError


def test_index_and_health(client):
    assert client.get("/").get_json() == {"message": "Welcome to the online supermarket!"}
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_unknown_route_returns_json(client):
    response = client.get("/nowhere")

    assert response.status_code == 404
    assert "error" in response.get_json()


def test_store_failures_are_hidden(app, client, monkeypatch):
    def broken_find_one(*args, **kwargs):
        raise ServerSelectionTimeoutError("mongo-1:27017 unreachable")

    products = app.extensions["catalog"].products
    monkeypatch.setattr(products.collection, "find_one", broken_find_one)

    response = client.get("/products/64b7f0c2a1b2c3d4e5f60718")

    assert response.status_code == 500
    assert response.get_json() == {"error": "Internal server error"}


def test_components_share_the_injected_database(app, db):
    catalog = app.extensions["catalog"]

    assert catalog.db is db
    assert catalog.products.collection.name == "products"
