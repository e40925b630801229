"""Set existence and ownership checks run before any card write."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from cardcoach.db.operations import select_set_with_owner
from cardcoach.models.db import SetDB
from cardcoach.models.failure import NotFoundError, UnauthorizedError

logger = logging.getLogger(__name__)


async def load_owned_set(session: AsyncSession, set_id: int, requester_id: int) -> SetDB:
    """
    Load a set and confirm the requester authored it.

    Raises:
        NotFoundError: No set with this id exists
        UnauthorizedError: The set belongs to another user
    """
    db_set = await select_set_with_owner(session, set_id)
    if db_set is None:
        raise NotFoundError(f"Set {set_id} does not exist")

    if db_set.author_id != requester_id:
        logger.warning(
            "User %s attempted to access set %s owned by %s",
            requester_id,
            set_id,
            db_set.author_id,
        )
        raise UnauthorizedError(f"You do not have access to set {set_id}")

    return db_set


async def authorize_set_owner(session: AsyncSession, set_id: int, requester_id: int) -> int:
    """Confirm the requester owns the set. Returns the owner's id."""
    db_set = await load_owned_set(session, set_id, requester_id)
    return db_set.author_id
