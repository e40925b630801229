"""
Card reconciliation.

Compares the card list a client started editing from ("before") with the
list it submits ("after") and classifies every card into exactly one of:
unchanged, altered, removed, added.

The before snapshot is trusted as submitted. Whether the set belongs to
the requester is checked separately before the diff is applied.
"""

import logging
from collections.abc import Sequence

from cardcoach.models.card import CardDiff, ExistingCard, SubmittedCard

logger = logging.getLogger(__name__)


def diff_cards(before: Sequence[ExistingCard], after: Sequence[SubmittedCard]) -> CardDiff:
    """
    Compute the card operations that turn ``before`` into ``after``.

    - A before card with no after entry of the same id is removed.
    - A before card whose after entry differs in term or definition is altered;
      the after version is kept.
    - Every NewCard in ``after`` is added, projected to its term/definition.

    An ExistingCard in ``after`` whose id is not in ``before`` is neither
    added nor altered: it is dropped and logged.

    Each id is classified once. A repeated id in ``before`` is ignored after
    its first occurrence; a repeated id in ``after`` resolves to its first entry.

    Pure and deterministic. Output order follows input order.
    """
    after_by_id: dict[int, ExistingCard] = {}
    added = []
    for card in after:
        if isinstance(card, ExistingCard):
            after_by_id.setdefault(card.id, card)
        else:
            added.append(card.fields())

    diff = CardDiff(added=added)
    before_ids: set[int] = set()
    for card in before:
        if card.id in before_ids:
            continue
        before_ids.add(card.id)
        match = after_by_id.get(card.id)
        if match is None:
            diff.removed.append(card.id)
        elif match.fields() != card.fields():
            diff.altered.append(match)

    dropped = [card_id for card_id in after_by_id if card_id not in before_ids]
    if dropped:
        logger.warning(
            "Ignoring %d submitted card(s) with unknown ids: %s",
            len(dropped),
            dropped,
        )

    return diff
