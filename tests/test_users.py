"""Tests for signup and login."""
import bcrypt
import pytest

from catalog_api.errors import ValidationError
from catalog_api.users import Credentials


def _signup(client, email="shopper@example.com", password="s3cret!"):
    return client.post("/users", json={"email": email, "password": password})


def test_credentials_require_email_and_password():
    for payload in ({}, {"email": "a@example.com"}, {"password": "x"}, None):
        with pytest.raises(ValidationError):
            Credentials.from_payload(payload)


def test_credentials_normalize_email():
    credentials = Credentials.from_payload({"email": "  Shopper@Example.COM ", "password": "x"})

    assert credentials.email == "shopper@example.com"


def test_signup_stores_hashed_password(client, db):
    response = _signup(client)

    body = response.get_json()
    assert response.status_code == 200
    assert body["message"] == "New user account has been created"
    assert "password" not in body

    user = db.users.find_one({"email": "shopper@example.com"})
    assert str(user["_id"]) == body["userId"]
    assert user["password"] != b"s3cret!"
    assert bcrypt.checkpw(b"s3cret!", user["password"])


def test_signup_missing_fields(client, db):
    response = client.post("/users", json={"email": "shopper@example.com"})

    assert response.status_code == 400
    assert response.get_json() == {"error": "Please provide email and password"}
    assert db.users.count_documents({}) == 0


def test_signup_rejects_duplicate_email(client, db):
    _signup(client)

    response = _signup(client, email="SHOPPER@example.com")

    assert response.status_code == 400
    assert db.users.count_documents({}) == 1


def test_login_returns_usable_token(client, catalog, app):
    _signup(client)

    response = client.post(
        "/login", json={"email": "shopper@example.com", "password": "s3cret!"}
    )

    assert response.status_code == 200
    token = response.get_json()["accessToken"]
    with app.app_context():
        claims = catalog.tokens.verify(token)
    assert claims["email"] == "shopper@example.com"


def test_wrong_password_and_unknown_email_look_the_same(client):
    _signup(client)

    wrong_password = client.post(
        "/login", json={"email": "shopper@example.com", "password": "guess"}
    )
    unknown_email = client.post(
        "/login", json={"email": "stranger@example.com", "password": "s3cret!"}
    )

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.get_json() == unknown_email.get_json()


def test_login_missing_fields(client):
    response = client.post("/login", json={"email": "shopper@example.com"})

    assert response.status_code == 400


def test_signup_rejects_overlong_password(client, db):
    response = _signup(client, password="x" * 100)

    assert response.status_code == 400
    assert response.get_json()["fields"] == ["password"]
    assert db.users.count_documents({}) == 0


def test_signup_accepts_password_at_bcrypt_limit(client):
    assert _signup(client, password="x" * 72).status_code == 200


def test_overlong_password_login_is_plain_invalid_credentials(client):
    _signup(client)

    overlong = client.post(
        "/login", json={"email": "shopper@example.com", "password": "x" * 100}
    )
    wrong = client.post(
        "/login", json={"email": "shopper@example.com", "password": "guess"}
    )

    assert overlong.status_code == 401
    assert overlong.get_json() == wrong.get_json()
