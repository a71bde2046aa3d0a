"""
Questions Unlimited Backend: Answer Service
============================================

What:  Get, add, update and delete the answer attached to a question.
Who:   Called by the /questions/{id}/answer routes.

Answers are addressed by their question's id, not their own. The schema
does not stop a question from collecting several answers; `get` returns the
earliest one and `update`/`delete` act on all of them.
"""

import logging
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from questionbank.exceptions import NoPayloadError, NotFoundError, UnprocessableError
from questionbank.models.answer import Answer
from questionbank.schemas.question import AnswerIn, AnswerOut, answer_from_row
from questionbank.services import store_errors

logger = logging.getLogger(__name__)


def _check_question_id(question_id: int, answer: AnswerIn) -> None:
    """A body question_id, when present, must match the URL."""
    if answer.question_id is not None and answer.question_id != question_id:
        raise UnprocessableError(
            message=(
                f"Payload question_id {answer.question_id} does not match "
                f"question {question_id}"
            ),
            field="question_id",
        )


class AnswerService:
    """Business logic for answers."""

    async def get(self, db: AsyncSession, question_id: int) -> AnswerOut:
        """
        The answer for a question (lowest id when there are several).

        Raises:
            NotFoundError: The question has no answer (→ 404)
        """
        with store_errors("retrieve the answer", {"question_id": question_id}):
            result = await db.execute(
                select(
                    Answer.id.label("id"),
                    Answer.content.label("content"),
                    Answer.question_id.label("question_id"),
                )
                .where(Answer.question_id == question_id)
                .order_by(Answer.id)
                .limit(1)
            )
            row = result.first()

        if row is None:
            raise NotFoundError(resource="answer for question", resource_id=question_id)
        return answer_from_row(row)

    async def add(self, db: AsyncSession, question_id: int, answer: AnswerIn) -> AnswerOut:
        """
        Attach an answer to a question.

        Does not check for an existing answer. A question id that does not
        exist fails the foreign key and surfaces as StoreError (→ 400).
        """
        _check_question_id(question_id, answer)

        with store_errors("add the answer", {"question_id": question_id}):
            new_answer = Answer(content=answer.content, question_id=question_id)
            db.add(new_answer)
            await db.flush()
            await db.commit()

        logger.info("Answer %d added to question %d", new_answer.id, question_id)
        return AnswerOut.model_validate(new_answer)

    async def update(
        self,
        db: AsyncSession,
        question_id: int,
        answer: Optional[AnswerIn],
    ) -> AnswerOut:
        """
        Overwrite the answer text for a question.

        Raises:
            NoPayloadError:     `answer` is None (→ 404)
            UnprocessableError: body question_id disagrees with the URL (→ 422)
            NotFoundError:      the question has no answer (→ 404)
        """
        if answer is None:
            raise NoPayloadError(resource="answer")
        _check_question_id(question_id, answer)

        current = await self.get(db, question_id)

        with store_errors("update the answer", {"question_id": question_id}):
            await db.execute(
                update(Answer)
                .where(Answer.question_id == question_id)
                .values({Answer.content: answer.content})
                .execution_options(synchronize_session=False)
            )
            await db.commit()

        logger.info("Answer for question %d updated", question_id)
        return current.model_copy(update={"content": answer.content})

    async def delete(self, db: AsyncSession, question_id: int) -> None:
        """Delete every answer of a question; a question without one is a no-op."""
        with store_errors("delete the answer", {"question_id": question_id}):
            result = await db.execute(
                delete(Answer)
                .where(Answer.question_id == question_id)
                .execution_options(synchronize_session=False)
            )
            removed = result.rowcount
            await db.commit()
        logger.info("Deleted %d answer(s) for question %d", removed, question_id)


answer_service = AnswerService()
