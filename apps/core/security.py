"""
Core security - authentication classes for API.
"""

from django.http import HttpRequest
from ninja.errors import HttpError
from ninja.security import HttpBearer

from apps.accounts.models import User
from apps.accounts.services import get_user_for_access_token

BEARER_PREFIX = "bearer "


class BearerAuth(HttpBearer):
    """
    Bearer token authentication for organization owner endpoints.

    Tokens are signed by this server (see issue_access_token). The resolved
    User becomes request.auth; an invalid token triggers 401.
    """

    def authenticate(self, request: HttpRequest, token: str) -> User | None:
        return get_user_for_access_token(token)


def get_optional_user(request: HttpRequest) -> User | None:
    """
    User behind an optional bearer token, for endpoints open to anonymous callers.

    Raises:
        HttpError 401: A token was sent but is not valid
    """
    header = request.headers.get("Authorization", "")
    if not header:
        return None

    if not header.lower().startswith(BEARER_PREFIX):
        raise HttpError(401, "Invalid authorization header")

    user = get_user_for_access_token(header[len(BEARER_PREFIX) :].strip())
    if user is None:
        raise HttpError(401, "Invalid or expired token")
    return user
