"""
Study set API endpoints.

Create, list, read and reconcile the requester's own sets. Failures raised
by the coordinator are rendered by the application's SetError handler.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from cardcoach.api.deps import CurrentUser, get_set_coordinator
from cardcoach.models.card import CardFields, ExistingCard, NewCard, SubmittedCard
from cardcoach.services.set_coordinator import SetCoordinator

router = APIRouter(prefix="/sets", tags=["sets"])

Coordinator = Annotated[SetCoordinator, Depends(get_set_coordinator)]


class CardIn(BaseModel):
    """A card in a create request."""

    term: str
    definition: str


class BeforeCardIn(BaseModel):
    """A stored card as the client last saw it."""

    id: int
    term: str
    definition: str


class UpdatedCardIn(BaseModel):
    """
    A card in the edited snapshot.

    Cards flagged ``new`` or sent without an id are inserted.
    """

    id: int | None = None
    term: str
    definition: str
    new: bool = False

    def to_model(self) -> SubmittedCard:
        if self.new or self.id is None:
            return NewCard(term=self.term, definition=self.definition)
        return ExistingCard(id=self.id, term=self.term, definition=self.definition)


class CreateSetRequest(BaseModel):
    """Request model for creating a set."""

    title: str = Field(..., examples=["Spanish verbs"])
    description: str | None = None
    cards: list[CardIn] = Field(
        ...,
        description="Initial cards; at least one is required",
        examples=[[{"term": "hablar", "definition": "to speak"}]],
    )


class CreateSetResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    set_insert_id: int = Field(..., alias="setInsertId")


class UpdateSetRequest(BaseModel):
    """Request model for reconciling a set's cards."""

    model_config = ConfigDict(populate_by_name=True)

    before_cards: list[BeforeCardIn] = Field(
        ...,
        alias="beforeCards",
        description="Cards as loaded before editing",
    )
    updated_cards: list[UpdatedCardIn] = Field(
        ...,
        alias="updatedCards",
        description="Cards after editing",
    )


class CardOut(BaseModel):
    id: int
    term: str
    definition: str


class SetSummaryResponse(BaseModel):
    """One entry of the set list."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str
    description: str | None = None
    total_terms: int = Field(0, alias="totalTerms")
    mastered: int = 0


class SetListResponse(BaseModel):
    """The requester's sets, wrapped under ``userSets``."""

    model_config = ConfigDict(populate_by_name=True)

    user_sets: list[SetSummaryResponse] = Field(default_factory=list, alias="userSets")


class SetDetailResponse(BaseModel):
    """A set with its cards."""

    id: int
    title: str
    description: str | None = None
    cards: list[CardOut] = Field(default_factory=list)


def _card_out(card: ExistingCard) -> CardOut:
    return CardOut(id=card.id, term=card.term, definition=card.definition)


@router.post("", response_model=CreateSetResponse)
async def create_set(
    request: CreateSetRequest,
    user: CurrentUser,
    coordinator: Coordinator,
) -> CreateSetResponse:
    """
    Create a set with its initial cards.

    The set and all cards are written atomically.
    """
    cards = [CardFields(term=card.term, definition=card.definition) for card in request.cards]
    set_id = await coordinator.create_set(request.title, request.description, cards, user.id)
    return CreateSetResponse(set_insert_id=set_id)


@router.get("", response_model=SetListResponse)
async def list_sets(user: CurrentUser, coordinator: Coordinator) -> SetListResponse:
    """List the requester's sets with their card counts."""
    summaries = await coordinator.list_user_sets(user.id)
    user_sets = [
        SetSummaryResponse(
            id=summary.id,
            title=summary.title,
            description=summary.description,
            total_terms=summary.total_terms,
            mastered=summary.mastered,
        )
        for summary in summaries
    ]
    return SetListResponse(user_sets=user_sets)


@router.get("/{set_id}", response_model=SetDetailResponse)
async def get_set(set_id: int, user: CurrentUser, coordinator: Coordinator) -> SetDetailResponse:
    """Get one of the requester's sets with all of its cards."""
    detail = await coordinator.get_user_set(set_id, user.id)
    return SetDetailResponse(
        id=detail.id,
        title=detail.title,
        description=detail.description,
        cards=[_card_out(card) for card in detail.cards],
    )


@router.put("/{set_id}", response_model=list[CardOut])
async def update_set(
    set_id: int,
    request: UpdateSetRequest,
    user: CurrentUser,
    coordinator: Coordinator,
) -> list[CardOut]:
    """
    Reconcile a set's cards from a before/after snapshot.

    Only the differences are written, in one transaction. Returns the
    set's cards as stored after the update.
    """
    before = [
        ExistingCard(id=card.id, term=card.term, definition=card.definition)
        for card in request.before_cards
    ]
    after = [card.to_model() for card in request.updated_cards]

    cards = await coordinator.update_set(set_id, user.id, before, after)
    return [_card_out(card) for card in cards]
