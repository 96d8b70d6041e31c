"""
Accounts services - identity resolution.
"""

from django.core import signing
from django.db import IntegrityError, transaction

from apps.accounts.models import User, normalize_email
from apps.core.logging import get_logger
from config.settings.base import settings

logger = get_logger(__name__)

ACCESS_TOKEN_SALT = "kindercause.accounts.access"


def find_or_create_user_by_email(email: str, name: str = "") -> tuple[User, bool]:
    """
    Return the User for an email, creating it if needed.

    Atomic under concurrent webhooks: the unique constraint on email decides
    the winner, and the loser fetches the row that won the race.

    Returns:
        Tuple of (user, created)
    """
    email = normalize_email(email)

    try:
        return User.objects.get(email=email), False
    except User.DoesNotExist:
        pass

    try:
        with transaction.atomic():
            user = User.objects.create_user(email=email, name=name)
    except IntegrityError:
        # Concurrent insert won the race, fetch the winner
        return User.objects.get(email=email), False

    logger.info("user_created", **{"usr.id": str(user.pk), "usr.email": email})
    return user, True


def get_user_by_reference(reference: str | None) -> User | None:
    """
    Look up a User by a client reference (the User primary key as a string).

    Returns None for a missing, malformed, or unknown reference.
    """
    if not reference:
        return None

    try:
        return User.objects.get(pk=int(reference))
    except (ValueError, User.DoesNotExist):
        logger.info("user_reference_not_found", client_reference_id=reference)
        return None


def issue_access_token(user: User) -> str:
    """Signed bearer token identifying a user to the owner API."""
    return signing.dumps({"uid": user.pk}, salt=ACCESS_TOKEN_SALT)


def get_user_for_access_token(token: str | None) -> User | None:
    """
    Resolve a bearer token issued by issue_access_token().

    Returns None for a missing, tampered, expired, or orphaned token.
    """
    if not token:
        return None

    try:
        payload = signing.loads(
            token, salt=ACCESS_TOKEN_SALT, max_age=settings.ACCESS_TOKEN_MAX_AGE
        )
    except signing.BadSignature:
        # SignatureExpired is a subclass
        logger.info("access_token_rejected")
        return None

    return User.objects.filter(pk=payload.get("uid")).first()
