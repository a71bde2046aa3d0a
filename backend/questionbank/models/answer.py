"""
Answer SQLAlchemy model.

The column keeps its historical name `answer`; the ORM attribute is
`content` to match the JSON contract. `question_id` cascades on delete, so
removing a question removes its answer.
"""

from sqlalchemy import ForeignKey, Identity, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from questionbank.database import Base


class Answer(Base):
    """The answer to one question (uniqueness per question is not enforced)."""

    __tablename__ = "answers"

    id: Mapped[int] = mapped_column(Integer, Identity(always=True), primary_key=True)
    content: Mapped[str] = mapped_column("answer", Text, nullable=False)
    question_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("questions.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Every answer lookup filters on question_id
    __table_args__ = (
        Index("idx_answers_question_id", "question_id"),
    )

    def __repr__(self) -> str:
        return f"<Answer(id={self.id}, question_id={self.question_id})>"
