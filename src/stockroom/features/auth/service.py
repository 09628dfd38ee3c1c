"""Lookups and creation of staff accounts."""
from typing import Optional
from . import models


async def get_user_by_email(email: str) -> Optional[models.User]:
    """Retrieves a user by their login email, or None."""
    return await models.User.get_or_none(email=email.lower())


async def create_user(email: str, hashed_password: str, role: str = "staff") -> models.User:
    """Creates a user from an already hashed password.

    Emails are stored lower-cased so logins are case-insensitive.
    """
    return await models.User.create(
        email=email.lower(),
        hashed_password=hashed_password,
        role=role,
    )
