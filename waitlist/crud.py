"""Database operations for waitlist signups."""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .db import Database
from .exceptions import DuplicateEmailError, StorageError
from .models import User
from .logger import logger


def _driver_message(exc: SQLAlchemyError) -> str:
    """Return the DBAPI error text without SQLAlchemy's statement dump."""
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


async def insert_user(database: Database, email: str) -> User:
    """Insert a new signup. Raises DuplicateEmailError on duplicate email."""
    async with database.session() as session:
        try:
            async with session.begin():
                user = User(email=email)
                session.add(user)
            await session.refresh(user)  # Load server-side created_at
            return user
        except IntegrityError as e:
            logger.warning(f"Duplicate email rejected: {email}")
            raise DuplicateEmailError(_driver_message(e)) from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to insert signup: {email}", exc_info=True)
            raise StorageError(_driver_message(e)) from e


async def list_users(database: Database) -> list[User]:
    """Return every stored signup ordered by id."""
    async def _select():
        async with database.session() as session:
            result = await session.execute(select(User).order_by(User.id.asc()))
            return list(result.scalars().all())

    try:
        users = await database.retry(_select)
    except SQLAlchemyError as e:
        logger.error("Failed to list users", exc_info=True)
        raise StorageError(_driver_message(e)) from e
    logger.debug(f"Query executed: returned {len(users)} users")
    return users
