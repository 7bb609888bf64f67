import mongomock
import pytest

from catalog_api import create_app

TEST_CONFIG = {
    "TESTING": True,
    "JWT_SECRET_KEY": "test-secret-key-with-enough-length-for-hs256",
    "BCRYPT_ROUNDS": 4,
}


@pytest.fixture
def db():
    return mongomock.MongoClient().db


@pytest.fixture
def app(db):
    return create_app(TEST_CONFIG, database=db)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def catalog(app):
    return app.extensions["catalog"]


@pytest.fixture
def references(db):
    """Reference collections the product writes resolve against."""
    brands = {
        name: db.brands.insert_one({"name": name}).inserted_id
        for name in ("Farmhouse", "Golden Grain", "Sunny Orchard")
    }
    categories = {
        name: db.categories.insert_one({"name": name}).inserted_id
        for name in ("Dairy", "Bakery", "Fruit")
    }
    tags = {
        name: db.tags.insert_one({"name": name}).inserted_id
        for name in ("dairy", "organic", "gluten-free", "local")
    }
    return {"brands": brands, "categories": categories, "tags": tags}


@pytest.fixture
def auth_headers(client):
    client.post("/users", json={"email": "shopper@example.com", "password": "s3cret!"})
    response = client.post(
        "/login", json={"email": "shopper@example.com", "password": "s3cret!"}
    )
    token = response.get_json()["accessToken"]
    return {"Authorization": f"Bearer {token}"}


def milk_payload(**overrides):
    payload = {
        "name": "Milk",
        "category": "Dairy",
        "brand": "Farmhouse",
        "price": 3.5,
        "description": "1L",
        "tags": ["fresh", "dairy"],
    }
    payload.update(overrides)
    return payload
