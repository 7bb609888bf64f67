from datetime import timedelta
from typing import Dict, Optional

import jwt
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException

from .config import TOKEN_LIFETIME
from .errors import ExpiredTokenError, InvalidTokenError


class TokenService:
    """Issues and verifies the signed access tokens handed out at login.

    Signing uses the app's ``JWT_SECRET_KEY`` through flask_jwt_extended, so
    both methods need an application context.
    """

    def __init__(self, lifetime: Optional[timedelta] = None):
        self.lifetime = lifetime if lifetime is not None else TOKEN_LIFETIME

    def issue(self, user_id, email: str) -> str:
        return create_access_token(
            identity=str(user_id),
            additional_claims={"user_id": str(user_id), "email": email},
            expires_delta=self.lifetime,
        )

    def verify(self, token: str) -> Dict:
        try:
            claims = decode_token(token)
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredTokenError("Token has expired") from exc
        except (jwt.PyJWTError, JWTExtendedException) as exc:
            raise InvalidTokenError("Token is invalid") from exc

        if not claims.get("user_id") or not claims.get("email"):
            raise InvalidTokenError("Token is missing identity claims")

        return claims
