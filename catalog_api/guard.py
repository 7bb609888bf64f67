from functools import wraps
from typing import Mapping, Optional

from flask import current_app, g, request

from .errors import AuthError, MissingTokenError
from .tokens import TokenService


def extract_bearer_token(headers: Mapping) -> Optional[str]:
    """Take the second space-separated segment of ``Authorization: Bearer <token>``.

    Parsed here instead of via ``verify_jwt_in_request`` so that a bare
    ``Bearer`` header counts as a missing token and every failure maps to 403.
    """
    auth_header = headers.get("Authorization")
    if not auth_header:
        return None
    segments = auth_header.split(" ")
    if len(segments) < 2 or not segments[1]:
        return None
    return segments[1]


def authorize(headers: Mapping, tokens: TokenService) -> dict:
    """Return the verified token claims for a set of request headers."""
    token = extract_bearer_token(headers)
    if token is None:
        raise MissingTokenError("Authorization token is required")
    return tokens.verify(token)


def token_required(view):
    """Reject the request with 403 unless it carries a valid bearer token.

    The verified claims are available to the view as ``g.current_user``.
    """

    @wraps(view)
    def decorated_view(*args, **kwargs):
        tokens = current_app.extensions["catalog"].tokens
        try:
            g.current_user = authorize(request.headers, tokens)
        except AuthError as exc:
            current_app.logger.warning(
                "Rejected request to %s: %s token", request.path, exc.reason
            )
            raise
        return view(*args, **kwargs)

    return decorated_view
