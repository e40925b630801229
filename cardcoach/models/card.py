from dataclasses import dataclass, field


@dataclass(frozen=True)
class CardFields:
    """The user-editable content of a card."""

    term: str
    definition: str


@dataclass(frozen=True)
class ExistingCard:
    """
    A card that already has a store-assigned identity.

    Attributes:
        id: Primary key in published_cards
        term: Front side text
        definition: Back side text
    """

    id: int
    term: str
    definition: str

    def fields(self) -> CardFields:
        return CardFields(term=self.term, definition=self.definition)


@dataclass(frozen=True)
class NewCard:
    """A card submitted by the client that has not been stored yet."""

    term: str
    definition: str

    def fields(self) -> CardFields:
        return CardFields(term=self.term, definition=self.definition)


# A client-submitted "after" entry
SubmittedCard = ExistingCard | NewCard


@dataclass
class CardDiff:
    """
    Card operations needed to move a set from one snapshot to another.

    Attributes:
        added: Content of cards to insert (ids assigned by the store)
        altered: Existing cards whose term or definition changed
        removed: Ids of cards to delete
    """

    added: list[CardFields] = field(default_factory=list)
    altered: list[ExistingCard] = field(default_factory=list)
    removed: list[int] = field(default_factory=list)

    def is_empty(self) -> bool:
        """True if applying this diff would change nothing."""
        return not (self.added or self.altered or self.removed)


@dataclass
class SetSummary:
    """A set as shown in the owner's set list."""

    id: int
    title: str
    description: str | None
    total_terms: int
    mastered: int = 0


@dataclass
class SetDetail:
    """A single set with all of its cards."""

    id: int
    title: str
    description: str | None
    cards: list[ExistingCard] = field(default_factory=list)
