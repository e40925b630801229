"""
SQLAlchemy ORM models for persistent storage.

Table names match the existing cardcoach schema.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    false,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class UserDB(Base):
    """A registered account."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    sets: Mapped[list["SetDB"]] = relationship(back_populates="author")

    def __repr__(self) -> str:
        return f"<UserDB(id={self.id}, username={self.username})>"


class SetDB(Base):
    """
    A published study set.

    author_id is fixed at creation and is the only key checked before
    any card in the set is written.
    """

    __tablename__ = "published_sets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    skip_mastered_terms: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false())
    mastery_requirement: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    author: Mapped["UserDB"] = relationship(back_populates="sets")
    cards: Mapped[list["CardDB"]] = relationship(
        back_populates="set", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<SetDB(id={self.id}, name={self.name}, author_id={self.author_id})>"


class CardDB(Base):
    """A term/definition pair belonging to exactly one set."""

    __tablename__ = "published_cards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    set_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("published_sets.id", ondelete="CASCADE"), index=True
    )
    term: Mapped[str] = mapped_column(Text)
    definition: Mapped[str] = mapped_column(Text)

    # Study progress; never written by set edits
    order_num: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    mastery_progress: Mapped[int] = mapped_column(Integer, default=0, server_default="0")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    set: Mapped["SetDB"] = relationship(back_populates="cards")

    def __repr__(self) -> str:
        return f"<CardDB(id={self.id}, set_id={self.set_id}, term={self.term})>"
