"""
Questions Unlimited Backend: Question Service
==============================================

What:  CRUD and paginated listing of questions with their tags.
Who:   Called by the question routes and the index page.

Read Path:
    Every read runs the same LEFT JOIN:

        SELECT q.id, q.title, q.content, t.name AS tag_name
        FROM questions q
        LEFT JOIN question_tags qt ON qt.question_id = q.id
        LEFT JOIN tags t ON t.id = qt.tag_id
        [WHERE ...] ORDER BY q.id, t.id

    and folds the rows with `questions_from_rows`. Pagination first picks
    the page's question ids (ORDER BY id LIMIT/OFFSET), then joins tags for
    exactly those ids, so a question with many tags never spills across
    pages.

Write Path:
    add/update/delete flush their rows and commit before returning, so the
    response is only built once the change is durable. A failure anywhere
    before the commit leaves nothing behind: get_db_session rolls the whole
    transaction back, including a question insert whose tag insert failed.

Pagination Rules:
    page is 1-based, limit >= 1, offset = (page - 1) * limit.
    offset > total  → PaginationInvalidError
    offset == total → valid, empty page
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from questionbank.config import settings
from questionbank.exceptions import (
    NoPayloadError,
    NotFoundError,
    PaginationInvalidError,
    UnprocessableError,
)
from questionbank.models.question import Question, Tag, question_tags
from questionbank.schemas.question import QuestionIn, QuestionOut, questions_from_rows
from questionbank.services import store_errors

logger = logging.getLogger(__name__)


def _joined_rows():
    """The shared question ⟕ question_tags ⟕ tags select."""
    return (
        select(
            Question.id.label("id"),
            Question.title.label("title"),
            Question.content.label("content"),
            Tag.name.label("tag_name"),
        )
        .select_from(Question)
        .outerjoin(question_tags, question_tags.c.question_id == Question.id)
        .outerjoin(Tag, Tag.id == question_tags.c.tag_id)
        .order_by(Question.id, Tag.id)
    )


class QuestionService:
    """
    Business logic for questions.

    Args:
        dedupe_tags: When True, a tag name that already exists reuses the
                     oldest matching `tags` row instead of inserting a new one.
    """

    def __init__(self, dedupe_tags: bool = False):
        self.dedupe_tags = dedupe_tags

    # ── Reads ─────────────────────────────────────────────────────────────

    async def count(self, db: AsyncSession) -> int:
        """Total number of questions."""
        with store_errors("count questions"):
            result = await db.execute(select(func.count()).select_from(Question))
            return result.scalar_one()

    async def get(self, db: AsyncSession, question_id: int) -> QuestionOut:
        """
        Fetch one question with its tags.

        Raises:
            NotFoundError: No question has this id (→ 404)
            StoreError:    Query failed
        """
        with store_errors("retrieve the question", {"question_id": question_id}):
            result = await db.execute(_joined_rows().where(Question.id == question_id))
            rows = result.all()

        if not rows:
            raise NotFoundError(resource="question", resource_id=question_id)
        return questions_from_rows(rows)[0]

    async def paginated_get(
        self,
        db: AsyncSession,
        page: int,
        limit: int,
    ) -> Tuple[List[QuestionOut], int]:
        """
        One page of questions in ascending id order, and the total count.

        The page holds min(limit, total - (page - 1) * limit) questions;
        consecutive pages neither overlap nor skip ids.

        Raises:
            PaginationInvalidError: page < 1, limit < 1, or the offset is
                                    beyond the total row count (→ 404)
        """
        total = await self.count(db)
        offset = (page - 1) * limit
        if page < 1 or limit < 1 or offset > total:
            raise PaginationInvalidError(page=page, limit=limit, total=total)

        with store_errors("retrieve questions", {"page": page, "limit": limit}):
            id_result = await db.execute(
                select(Question.id).order_by(Question.id).limit(limit).offset(offset)
            )
            page_ids = list(id_result.scalars().all())
            if not page_ids:
                return [], total

            result = await db.execute(_joined_rows().where(Question.id.in_(page_ids)))
            rows = result.all()

        logger.debug("Page %d (limit %d): %d of %d questions", page, limit, len(page_ids), total)
        return questions_from_rows(rows), total

    async def list_all(self, db: AsyncSession) -> List[QuestionOut]:
        """Every question in ascending id order (the un-paginated list)."""
        with store_errors("retrieve questions"):
            result = await db.execute(_joined_rows())
            return questions_from_rows(result.all())

    async def get_random(self, db: AsyncSession) -> Optional[QuestionOut]:
        """A uniformly random question, or None when the bank is empty."""
        with store_errors("pick a random question"):
            result = await db.execute(
                select(Question.id).order_by(func.random()).limit(1)
            )
            question_id = result.scalar_one_or_none()

        if question_id is None:
            return None
        return await self.get(db, question_id)

    # ── Writes ────────────────────────────────────────────────────────────

    async def _tags_for(self, db: AsyncSession, names: Optional[List[str]]) -> List[Tag]:
        """
        Tag rows to link for `names`.

        Without dedupe every name becomes a new Tag. With dedupe, names that
        already exist map to their oldest row and only the rest are new.
        """
        if not names:
            return []
        if not self.dedupe_tags:
            return [Tag(name=name) for name in names]

        result = await db.execute(
            select(Tag).where(Tag.name.in_(names)).order_by(Tag.id)
        )
        existing = {}
        for tag in result.scalars():
            existing.setdefault(tag.name, tag)
        return [existing.get(name) or Tag(name=name) for name in names]

    async def add(self, db: AsyncSession, question: QuestionIn) -> QuestionOut:
        """
        Insert a question, its tag rows, and one junction row per tag.

        Returns the stored question including the generated id. Any `id`
        in the payload is ignored.
        """
        with store_errors("add the question"):
            tags = await self._tags_for(db, question.tags)
            new_question = Question(
                title=question.title,
                content=question.content,
                tags=tags,
            )
            db.add(new_question)
            await db.flush()
            await db.commit()

        logger.info(
            "Question %d added with %d tag(s)", new_question.id, len(tags)
        )
        return await self.get(db, new_question.id)

    async def update(
        self,
        db: AsyncSession,
        question_id: int,
        question: Optional[QuestionIn],
    ) -> QuestionOut:
        """
        Overwrite title/content and replace the whole tag set.

        Tags missing from the new payload are unlinked; the old `tags` rows
        themselves are kept.

        Raises:
            NoPayloadError:     `question` is None (→ 404)
            UnprocessableError: payload id disagrees with `question_id` (→ 422)
            NotFoundError:      no question has this id (→ 404)
        """
        if question is None:
            raise NoPayloadError(resource="question")
        if question.id is not None and question.id != question_id:
            raise UnprocessableError(
                message=f"Payload id {question.id} does not match question {question_id}",
                field="id",
            )

        with store_errors("update the question", {"question_id": question_id}):
            result = await db.execute(
                select(Question)
                .options(selectinload(Question.tags))
                .where(Question.id == question_id)
            )
            stored = result.scalar_one_or_none()
            if stored is None:
                raise NotFoundError(resource="question", resource_id=question_id)

            stored.title = question.title
            stored.content = question.content
            # Assigning the collection deletes every old link, then inserts the new ones
            stored.tags = await self._tags_for(db, question.tags)
            await db.flush()
            await db.commit()

        logger.info("Question %d updated", question_id)
        return await self.get(db, question_id)

    async def delete(self, db: AsyncSession, question_id: int) -> None:
        """
        Delete a question by id.

        Junction rows and answers are removed by the ON DELETE CASCADE
        foreign keys. Deleting an absent id is a no-op.
        """
        with store_errors("delete the question", {"question_id": question_id}):
            result = await db.execute(
                delete(Question)
                .where(Question.id == question_id)
                .execution_options(synchronize_session=False)
            )
            removed = result.rowcount
            await db.commit()

        if removed:
            logger.info("Question %d deleted", question_id)
        else:
            logger.info("Delete requested for missing question %d; nothing removed", question_id)


# ── Shared Instance ───────────────────────────────────────────────────────
# Stateless apart from configuration; routes import this one
question_service = QuestionService(dedupe_tags=settings.dedupe_tags)
