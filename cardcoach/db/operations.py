"""
Database operations for sets, cards and users.

Each function is a single round-trip against the session it is given and
holds no business rules. Callers own the transaction.
"""

from collections.abc import Sequence
from typing import Any

from sqlalchemy import delete, func, insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from cardcoach.models.card import CardFields, ExistingCard
from cardcoach.models.db import CardDB, SetDB, UserDB

# --- Set Operations ---


async def insert_set(
    session: AsyncSession, title: str, description: str | None, owner_id: int
) -> SetDB:
    """
    Insert a set row and return it with its assigned id.

    Cards must be inserted in the same transaction; a set never exists
    without at least one card.
    """
    db_set = SetDB(name=title, description=description, author_id=owner_id)
    session.add(db_set)
    await session.flush()
    return db_set


async def select_set_with_owner(session: AsyncSession, set_id: int) -> SetDB | None:
    """
    Get a set by id, including its author_id.

    Returns None if no such set exists.
    """
    result = await session.execute(select(SetDB).where(SetDB.id == set_id))
    return result.scalar_one_or_none()


async def select_user_sets(session: AsyncSession, owner_id: int) -> list[tuple[SetDB, int]]:
    """Get all sets authored by a user with their card counts, oldest first."""
    card_count = (
        select(func.count(CardDB.id))
        .where(CardDB.set_id == SetDB.id)
        .correlate(SetDB)
        .scalar_subquery()
    )
    result = await session.execute(
        select(SetDB, card_count).where(SetDB.author_id == owner_id).order_by(SetDB.id)
    )
    return [(db_set, int(count)) for db_set, count in result.all()]


# --- Card Operations ---


async def select_set_cards(session: AsyncSession, set_id: int) -> list[CardDB]:
    """Get all cards of a set in display order."""
    result = await session.execute(
        select(CardDB).where(CardDB.set_id == set_id).order_by(CardDB.order_num, CardDB.id)
    )
    return list(result.scalars().all())


async def bulk_insert_cards(
    session: AsyncSession, set_id: int, cards: Sequence[CardFields]
) -> None:
    """
    Insert cards under a set with a single multi-row INSERT.

    Does nothing for an empty sequence.
    """
    if not cards:
        return

    rows = [
        {
            "set_id": set_id,
            "term": card.term,
            "definition": card.definition,
            "order_num": 0,
            "mastery_progress": 0,
        }
        for card in cards
    ]
    await session.execute(insert(CardDB).values(rows))


def _dialect_insert(session: AsyncSession) -> Any:
    """Pick the insert construct that supports ON CONFLICT for the bound dialect."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    msg = f"Card upsert is not supported on dialect '{dialect}'"
    raise NotImplementedError(msg)


def build_card_upsert(insert_fn: Any, set_id: int, cards: Sequence[ExistingCard]) -> Any:
    """
    Build INSERT ... ON CONFLICT (id) DO UPDATE for cards of one set.

    ``insert_fn`` is the dialect's ``insert`` construct. A card id listed
    more than once contributes only its first entry, since PostgreSQL
    refuses to update the same row twice in one statement.
    """
    rows: dict[int, dict[str, Any]] = {}
    for card in cards:
        rows.setdefault(
            card.id,
            {
                "id": card.id,
                "set_id": set_id,
                "term": card.term,
                "definition": card.definition,
                "order_num": 0,
                "mastery_progress": 0,
            },
        )

    stmt = insert_fn(CardDB).values(list(rows.values()))
    return stmt.on_conflict_do_update(
        index_elements=[CardDB.id],
        set_={"term": stmt.excluded.term, "definition": stmt.excluded.definition},
        where=CardDB.set_id == stmt.excluded.set_id,
    )


async def select_set_card_ids(session: AsyncSession, set_id: int) -> set[int]:
    """Get the ids of all cards stored under a set."""
    result = await session.execute(select(CardDB.id).where(CardDB.set_id == set_id))
    return set(result.scalars().all())


async def upsert_cards(
    session: AsyncSession, set_id: int, cards: Sequence[ExistingCard]
) -> None:
    """
    Overwrite term/definition of cards matched by id.

    The update only applies when the stored row belongs to ``set_id``, so a
    card id from another set is never overwritten. Study progress columns
    are left as they are. Callers pass ids already stored under the set;
    an unknown id would be inserted with its client-chosen key.
    """
    if not cards:
        return

    await session.execute(build_card_upsert(_dialect_insert(session), set_id, cards))


async def delete_cards_by_ids(session: AsyncSession, set_id: int, card_ids: Sequence[int]) -> int:
    """
    Delete the given cards of a set.

    Ids that belong to another set are ignored. Returns the number of
    deleted rows.
    """
    if not card_ids:
        return 0

    result = await session.execute(
        delete(CardDB).where(CardDB.set_id == set_id, CardDB.id.in_(list(card_ids)))
    )
    # rowcount is available on DELETE results; type stubs incomplete for async
    return int(result.rowcount)  # type: ignore[attr-defined]


def card_to_model(card: CardDB) -> ExistingCard:
    """Convert a database card to a domain model."""
    return ExistingCard(id=card.id, term=card.term, definition=card.definition)


# --- User Operations ---


async def create_user(
    session: AsyncSession, username: str, email: str, hashed_password: str
) -> UserDB:
    """
    Create a new user.

    Raises IntegrityError if the username or email is already taken.
    """
    user = UserDB(username=username, email=email, hashed_password=hashed_password)
    session.add(user)
    await session.flush()
    return user


async def get_user_by_username(session: AsyncSession, username: str) -> UserDB | None:
    """Get a user by username. Returns None if not found."""
    result = await session.execute(select(UserDB).where(UserDB.username == username).limit(1))
    return result.scalar_one_or_none()


async def get_user_by_email(session: AsyncSession, email: str) -> UserDB | None:
    """Get a user by email. Returns None if not found."""
    result = await session.execute(select(UserDB).where(UserDB.email == email).limit(1))
    return result.scalar_one_or_none()
