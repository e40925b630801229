"""
Transactional set persistence.

Every public operation runs in its own unit of work: one session checked
out from the Database, one explicit transaction, and guaranteed release on
every exit path. Store failures roll the whole transaction back and surface
as a single InternalError; ownership failures are raised before any write.

Concurrent updates of the same set are not serialized here. Two
reconciliations built from the same stale snapshot both commit, and the
last writer wins under the store's transaction isolation.
"""

import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardcoach.db.database import Database
from cardcoach.db.operations import (
    bulk_insert_cards,
    card_to_model,
    delete_cards_by_ids,
    insert_set,
    select_set_card_ids,
    select_set_cards,
    select_user_sets,
    upsert_cards,
)
from cardcoach.models.card import (
    CardDiff,
    CardFields,
    ExistingCard,
    SetDetail,
    SetSummary,
    SubmittedCard,
)
from cardcoach.models.failure import InternalError, NotFoundError, ValidationError
from cardcoach.services.card_diff import diff_cards
from cardcoach.services.ownership import load_owned_set

logger = logging.getLogger(__name__)


def validate_cards(cards: Sequence[CardFields | SubmittedCard]) -> None:
    """Raise ValidationError if any card has a blank term or definition."""
    for position, card in enumerate(cards, start=1):
        if not card.term or not card.term.strip():
            raise ValidationError(f"Card {position} is missing a term")
        if not card.definition or not card.definition.strip():
            raise ValidationError(f"Card {position} is missing a definition")


def validate_new_set(title: str, cards: Sequence[CardFields]) -> None:
    """
    Check a set before it is created.

    Runs before the store is touched, so a rejected set writes nothing.
    """
    if not title or not title.strip():
        raise ValidationError("Title is required")
    if not cards:
        raise ValidationError("A set must contain at least one card")
    validate_cards(cards)


class SetCoordinator:
    """
    Creates, reads and reconciles sets against an injected Database.

    Holds no per-request state; one instance can serve concurrent calls.
    """

    def __init__(self, database: Database):
        self._database = database

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        """
        Scope one unit of work.

        Commits when the block exits normally. Any other exit rolls back.
        Store errors are logged and replaced with InternalError; domain
        errors (NotFound, Unauthorized) propagate unchanged.
        """
        async with self._database.session() as session:
            try:
                async with session.begin():
                    yield session
            except SQLAlchemyError as e:
                logger.exception("%s failed, transaction rolled back", operation)
                raise InternalError() from e

    async def create_set(
        self,
        title: str,
        description: str | None,
        cards: Sequence[CardFields],
        owner_id: int,
    ) -> int:
        """
        Create a set together with its initial cards.

        The set row and all card rows are written in one transaction, the
        cards with a single bulk statement.

        Returns:
            The id assigned to the new set

        Raises:
            ValidationError: Blank title, no cards, or a card missing a field
            InternalError: The store rejected a statement; nothing was written
        """
        validate_new_set(title, cards)

        async with self._transaction("Create set") as session:
            db_set = await insert_set(session, title, description, owner_id)
            set_id = db_set.id
            await bulk_insert_cards(session, set_id, cards)

        logger.info("Created set %d for user %d with %d cards", set_id, owner_id, len(cards))
        return set_id

    async def apply_set_update(
        self, set_id: int, requester_id: int, diff: CardDiff
    ) -> list[ExistingCard]:
        """
        Apply a card diff to a set.

        Ownership is checked first inside the same unit of work; a failed
        check writes nothing. Writes then run in a fixed order: added,
        altered, removed. Empty buckets are skipped. Altered cards whose id is
        not stored under the set are ignored.

        Returns:
            The set's cards after the update

        Raises:
            NotFoundError: Set does not exist
            UnauthorizedError: Requester is not the set's owner
            InternalError: A statement failed; the transaction was rolled back
        """
        async with self._transaction("Set update") as session:
            await load_owned_set(session, set_id, requester_id)

            if diff.added:
                await bulk_insert_cards(session, set_id, diff.added)
            if diff.altered:
                stored_ids = await select_set_card_ids(session, set_id)
                altered = [card for card in diff.altered if card.id in stored_ids]
                if len(altered) < len(diff.altered):
                    logger.warning(
                        "Set %d: ignoring %d altered cards not stored in the set",
                        set_id,
                        len(diff.altered) - len(altered),
                    )
                await upsert_cards(session, set_id, altered)
            if diff.removed:
                await delete_cards_by_ids(session, set_id, diff.removed)

            refreshed = [card_to_model(card) for card in await select_set_cards(session, set_id)]

        logger.info(
            "Updated set %d: %d added, %d altered, %d removed",
            set_id,
            len(diff.added),
            len(diff.altered),
            len(diff.removed),
        )
        return refreshed

    async def update_set(
        self,
        set_id: int,
        requester_id: int,
        before: Sequence[ExistingCard],
        after: Sequence[SubmittedCard],
    ) -> list[ExistingCard]:
        """Reconcile a before/after snapshot and apply the result."""
        validate_cards(after)
        diff = diff_cards(before, after)
        return await self.apply_set_update(set_id, requester_id, diff)

    async def get_user_set(self, set_id: int, requester_id: int) -> SetDetail:
        """
        Get a set with its cards.

        Raises:
            NotFoundError: Set does not exist or contains no cards
            UnauthorizedError: Requester is not the set's owner
        """
        async with self._transaction("Get set") as session:
            db_set = await load_owned_set(session, set_id, requester_id)
            cards = await select_set_cards(session, set_id)

        if not cards:
            raise NotFoundError(f"Requested set {set_id} contains no cards")

        return SetDetail(
            id=db_set.id,
            title=db_set.name,
            description=db_set.description,
            cards=[card_to_model(card) for card in cards],
        )

    async def list_user_sets(self, owner_id: int) -> list[SetSummary]:
        """Get summaries of every set a user authored."""
        async with self._transaction("List sets") as session:
            rows = await select_user_sets(session, owner_id)

        return [
            SetSummary(
                id=db_set.id,
                title=db_set.name,
                description=db_set.description,
                total_terms=count,
            )
            for db_set, count in rows
        ]
