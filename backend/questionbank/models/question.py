"""
Questions Unlimited Backend: Question and Tag SQLAlchemy Models
================================================================

What:  ORM mapping for `questions`, `tags` and the `question_tags` junction.
Who:   Used by QuestionService for reads and writes, and by Alembic.

Table Design:
    questions      id (generated), title, content
    tags           id (generated), name  (no uniqueness on name)
    question_tags  (question_id, tag_id) composite primary key; both
                   foreign keys cascade on delete, so removing a question
                   removes its links without touching the tag rows

    Tag names are not unique in storage. Two questions tagged "history"
    normally reference two different `tags` rows; see
    `Settings.dedupe_tags` for the opt-in alternative.
"""

from typing import List

from sqlalchemy import Column, ForeignKey, Identity, Integer, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from questionbank.database import Base

# ── Junction Table ────────────────────────────────────────────────────────
# A plain Table (not a mapped class): rows carry no data besides the pair.
question_tags = Table(
    "question_tags",
    Base.metadata,
    Column(
        "question_id",
        Integer,
        ForeignKey("questions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        Integer,
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Tag(Base):
    """A single tag row. Rows are shared only when `dedupe_tags` is on."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, Identity(always=True), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name='{self.name}')>"


class Question(Base):
    """
    A trivia question.

    Lifecycle:
        1. Inserted with its tags in one transaction (id generated by the store)
        2. Updated by overwriting title/content and replacing every tag link
        3. Deleted by id; junction rows and answers go with it (FK cascade)
    """

    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(Integer, Identity(always=True), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    # passive_deletes: the database cascade removes junction rows, the ORM
    # does not issue its own DELETEs for them
    tags: Mapped[List[Tag]] = relationship(
        secondary=question_tags,
        passive_deletes=True,
        order_by=Tag.id,
    )

    def __repr__(self) -> str:
        return f"<Question(id={self.id}, title='{self.title}')>"
