"""Signed bearer tokens.

A token carries the user id and the user's ``token_version``; bumping the
version (logout, password reset) revokes every token issued before.
"""

from django.conf import settings
from django.core import signing

from .models import User


class TokenError(Exception):
    pass


def issue_token(user: User) -> str:
    return signing.dumps(
        {"uid": user.pk, "v": user.token_version},
        salt=settings.AUTH_TOKEN_SALT,
        compress=True,
    )


def user_from_token(token: str) -> User:
    max_age = settings.AUTH_TOKEN_MAX_AGE or None
    try:
        data = signing.loads(token, salt=settings.AUTH_TOKEN_SALT, max_age=max_age)
    except signing.SignatureExpired:
        raise TokenError("Token has expired")
    except signing.BadSignature:
        raise TokenError("Token is not valid")

    user = User.objects.filter(pk=data.get("uid"), is_active=True).first()
    if user is None:
        raise TokenError("User not found")
    if user.token_version != data.get("v"):
        raise TokenError("Token has been revoked")
    return user


def revoke_tokens(user: User) -> None:
    user.token_version += 1
    user.save(update_fields=["token_version"])
