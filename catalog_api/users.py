from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import bcrypt
from bson import ObjectId
from flask import current_app
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from .config import DEFAULT_BCRYPT_ROUNDS
from .errors import InvalidCredentialsError, ValidationError
from .tokens import TokenService

USERS = "users"
# bcrypt only accepts this many bytes of password input.
MAX_PASSWORD_BYTES = 72


def normalize_email(value: Optional[str]) -> str:
    return str(value or "").strip().lower()


@dataclass
class Credentials:
    email: str
    password: str

    @classmethod
    def from_payload(cls, payload) -> "Credentials":
        payload = payload if isinstance(payload, dict) else {}
        email = normalize_email(payload.get("email"))
        password = payload.get("password")
        if not email or not isinstance(password, str) or not password:
            raise ValidationError("Please provide email and password")
        return cls(email=email, password=password)


class UserService:
    """Signup and login against the users collection."""

    def __init__(self, db: Database, tokens: TokenService, rounds: int = DEFAULT_BCRYPT_ROUNDS):
        self.collection = db[USERS]
        self.tokens = tokens
        self.rounds = rounds

    def ensure_indexes(self) -> None:
        try:
            self.collection.create_index("email", unique=True)
        except PyMongoError as exc:
            current_app.logger.warning("Unable to ensure unique index for user emails: %s", exc)

    def hash_password(self, password: str) -> bytes:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds))

    def signup(self, credentials: Credentials) -> ObjectId:
        if len(credentials.password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes", fields=["password"]
            )
        if self.collection.find_one({"email": credentials.email}, {"_id": 1}):
            raise ValidationError("An account with this email already exists")

        user_document = {
            "email": credentials.email,
            "password": self.hash_password(credentials.password),
            "created_at": datetime.now(timezone.utc),
        }
        try:
            result = self.collection.insert_one(user_document)
        except DuplicateKeyError as exc:
            raise ValidationError("An account with this email already exists") from exc

        current_app.logger.info("Created user account for %s", credentials.email)
        return result.inserted_id

    def login(self, credentials: Credentials) -> str:
        user = self.collection.find_one({"email": credentials.email})
        stored_hash = user.get("password") if user else None
        if isinstance(stored_hash, str):
            stored_hash = stored_hash.encode("utf-8")

        # Unknown email and wrong password must look the same to the caller.
        password_bytes = credentials.password.encode("utf-8")
        if (
            not stored_hash
            or len(password_bytes) > MAX_PASSWORD_BYTES
            or not bcrypt.checkpw(password_bytes, stored_hash)
        ):
            current_app.logger.info("Failed login attempt for %s", credentials.email)
            raise InvalidCredentialsError("Invalid credentials")

        current_app.logger.info("User %s logged in", credentials.email)
        return self.tokens.issue(user["_id"], user["email"])
