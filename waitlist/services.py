"""Business logic layer for waitlist signups."""

from .crud import insert_user, list_users as crud_list_users
from .db import Database
from .logger import logger
from .normalizer import CanonicalEmail, EmailValidationError, normalize_email
from .schemas import UserOut


async def create_signup(database: Database, raw_email: str | None) -> CanonicalEmail:
    """Validate, normalize and store a signup email.

    Raises:
        EmailValidationError: the email was rejected, nothing was stored
        DuplicateEmailError: the canonical email is already on the waitlist
        StorageError: any other database failure
    """
    try:
        email = normalize_email(raw_email)
    except EmailValidationError as e:
        logger.info(f"Signup rejected: reason={e.reason.value}")
        raise

    user = await insert_user(database, email)
    logger.info(f"Signup stored: id={user.id} email={user.email}")
    return email


async def list_signups(database: Database) -> list[UserOut]:
    """Return all stored signups."""
    users = await crud_list_users(database)
    return [UserOut.model_validate(user) for user in users]
