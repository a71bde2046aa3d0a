"""
Questions Unlimited Backend: Question Service Tests
====================================================

What:  QuestionService against an in-memory SQLite store.

What we test:
    ✅ add → get round trip, tags returned as a set
    ✅ Pagination: page sizes, ascending ids, no overlap, empty last page
    ✅ Out-of-range pages raise PaginationInvalidError
    ✅ update replaces title, content and the whole tag set
    ✅ update without payload / with a mismatched id / for a missing id
    ✅ delete cascades to junction rows and answers
    ✅ Optional tag de-duplication
    ✅ Driver failures surface as StoreError
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from questionbank.exceptions import (
    NoPayloadError,
    NotFoundError,
    PaginationInvalidError,
    StoreError,
    UnprocessableError,
)
from questionbank.models import Answer, Tag, question_tags
from questionbank.schemas.question import QuestionIn
from questionbank.services.question_service import QuestionService


async def _count(db, table) -> int:
    result = await db.execute(select(func.count()).select_from(table))
    return result.scalar_one()


async def _add_many(service, db, n):
    stored = []
    for i in range(1, n + 1):
        stored.append(
            await service.add(db, QuestionIn(title=f"Q{i}", content=f"Question number {i}?"))
        )
    return stored


class TestQuestionServiceAddGet:
    """Round trip through add and get."""

    def setup_method(self):
        self.service = QuestionService()

    @pytest.mark.asyncio
    async def test_add_then_get(self, db_session, sample_question):
        """The stored question comes back with a generated id and its tags."""
        added = await self.service.add(db_session, sample_question)

        assert added.id is not None
        fetched = await self.service.get(db_session, added.id)
        assert fetched.title == "Capital"
        assert fetched.content == "Capital of France?"
        assert fetched.tags == ["geo"]

    @pytest.mark.asyncio
    async def test_tags_are_a_set(self, db_session):
        """Duplicate tag names in the payload collapse to one."""
        added = await self.service.add(
            db_session,
            QuestionIn(title="T", content="C", tags=["b", "a", "b", " a "]),
        )

        assert set(added.tags) == {"a", "b"}
        assert len(added.tags) == 2

    @pytest.mark.asyncio
    async def test_untagged_question_has_no_tags(self, db_session):
        added = await self.service.add(db_session, QuestionIn(title="T", content="C"))
        assert added.tags is None

    @pytest.mark.asyncio
    async def test_payload_id_is_ignored_on_add(self, db_session):
        added = await self.service.add(db_session, QuestionIn(id=999, title="T", content="C"))
        assert added.id != 999

    @pytest.mark.asyncio
    async def test_get_missing_raises_not_found(self, db_session):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.get(db_session, 42)
        assert "42" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_get_random_empty_bank(self, db_session):
        assert await self.service.get_random(db_session) is None

    @pytest.mark.asyncio
    async def test_get_random_returns_stored_question(self, db_session):
        stored = await _add_many(self.service, db_session, 3)
        picked = await self.service.get_random(db_session)
        assert picked.id in {q.id for q in stored}


class TestQuestionServicePagination:
    """paginated_get windowing rules."""

    def setup_method(self):
        self.service = QuestionService()

    @pytest.mark.asyncio
    async def test_page_sizes_and_order(self, db_session):
        """5 questions, limit 2 → pages of 2, 2, 1 in ascending id order."""
        stored = await _add_many(self.service, db_session, 5)
        ids = [q.id for q in stored]

        results = [
            await self.service.paginated_get(db_session, page=p, limit=2)
            for p in (1, 2, 3)
        ]
        pages = [questions for questions, _ in results]

        assert [len(p) for p in pages] == [2, 2, 1]
        assert {total for _, total in results} == {5}
        seen = [q.id for page in pages for q in page]
        assert seen == sorted(ids)

    @pytest.mark.asyncio
    async def test_many_tags_do_not_spill_across_pages(self, db_session):
        """A question's tag rows never push another question off the page."""
        await self.service.add(
            db_session, QuestionIn(title="A", content="A?", tags=["x", "y", "z"])
        )
        await self.service.add(db_session, QuestionIn(title="B", content="B?"))

        page, _ = await self.service.paginated_get(db_session, page=1, limit=2)

        assert [q.title for q in page] == ["A", "B"]
        assert page[0].tags == ["x", "y", "z"]

    @pytest.mark.asyncio
    async def test_page_starting_at_end_is_empty(self, db_session):
        """offset == total is a valid, empty page."""
        await _add_many(self.service, db_session, 4)
        assert await self.service.paginated_get(db_session, page=3, limit=2) == ([], 4)

    @pytest.mark.asyncio
    async def test_page_past_end_raises(self, db_session):
        await _add_many(self.service, db_session, 4)
        with pytest.raises(PaginationInvalidError) as exc_info:
            await self.service.paginated_get(db_session, page=4, limit=2)
        assert exc_info.value.total == 4

    @pytest.mark.asyncio
    async def test_empty_bank_first_page_is_empty(self, db_session):
        assert await self.service.paginated_get(db_session, page=1, limit=10) == ([], 0)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (-1, 5)])
    async def test_non_positive_values_raise(self, db_session, page, limit):
        with pytest.raises(PaginationInvalidError):
            await self.service.paginated_get(db_session, page=page, limit=limit)

    @pytest.mark.asyncio
    async def test_list_all_and_count(self, db_session):
        await _add_many(self.service, db_session, 3)
        everything = await self.service.list_all(db_session)

        assert [q.title for q in everything] == ["Q1", "Q2", "Q3"]
        assert await self.service.count(db_session) == 3


class TestQuestionServiceUpdate:
    """update overwrites fields and replaces the tag set."""

    def setup_method(self):
        self.service = QuestionService()

    @pytest.mark.asyncio
    async def test_update_replaces_everything(self, db_session):
        added = await self.service.add(
            db_session, QuestionIn(title="Old", content="Old?", tags=["a", "b"])
        )

        updated = await self.service.update(
            db_session,
            added.id,
            QuestionIn(id=added.id, title="New", content="New?", tags=["c"]),
        )

        assert updated.title == "New"
        assert updated.content == "New?"
        assert updated.tags == ["c"]
        assert (await self.service.get(db_session, added.id)).tags == ["c"]

    @pytest.mark.asyncio
    async def test_update_can_clear_tags(self, db_session):
        added = await self.service.add(
            db_session, QuestionIn(title="T", content="C", tags=["a"])
        )
        updated = await self.service.update(
            db_session, added.id, QuestionIn(title="T", content="C")
        )

        assert updated.tags is None
        assert await _count(db_session, question_tags) == 0

    @pytest.mark.asyncio
    async def test_update_without_payload(self, db_session):
        with pytest.raises(NoPayloadError):
            await self.service.update(db_session, 1, None)

    @pytest.mark.asyncio
    async def test_update_with_mismatched_id(self, db_session, sample_question):
        added = await self.service.add(db_session, sample_question)
        with pytest.raises(UnprocessableError) as exc_info:
            await self.service.update(
                db_session,
                added.id,
                QuestionIn(id=added.id + 1, title="T", content="C"),
            )
        assert exc_info.value.field == "id"

    @pytest.mark.asyncio
    async def test_update_missing_question(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.update(db_session, 7, QuestionIn(title="T", content="C"))


class TestQuestionServiceDelete:
    """delete relies on the ON DELETE CASCADE foreign keys."""

    def setup_method(self):
        self.service = QuestionService()

    @pytest.mark.asyncio
    async def test_delete_cascades(self, db_session, sample_question):
        added = await self.service.add(db_session, sample_question)
        db_session.add(Answer(content="Paris", question_id=added.id))
        await db_session.flush()

        await self.service.delete(db_session, added.id)

        with pytest.raises(NotFoundError):
            await self.service.get(db_session, added.id)
        assert await _count(db_session, question_tags) == 0
        assert await _count(db_session, Answer) == 0
        # Tag rows themselves are not removed
        assert await _count(db_session, Tag) == 1

    @pytest.mark.asyncio
    async def test_delete_missing_is_noop(self, db_session):
        await self.service.delete(db_session, 123)
        assert await self.service.count(db_session) == 0


class TestQuestionServiceTagDedupe:
    """Tag row reuse is opt-in."""

    @pytest.mark.asyncio
    async def test_default_inserts_new_tag_rows(self, db_session):
        service = QuestionService()
        await service.add(db_session, QuestionIn(title="A", content="A?", tags=["geo"]))
        await service.add(db_session, QuestionIn(title="B", content="B?", tags=["geo"]))

        assert await _count(db_session, Tag) == 2

    @pytest.mark.asyncio
    async def test_dedupe_reuses_existing_rows(self, db_session):
        service = QuestionService(dedupe_tags=True)
        await service.add(db_session, QuestionIn(title="A", content="A?", tags=["geo"]))
        second = await service.add(
            db_session, QuestionIn(title="B", content="B?", tags=["geo", "europe"])
        )

        assert second.tags == ["europe", "geo"]
        assert await _count(db_session, Tag) == 2


class TestQuestionServiceStoreErrors:
    """Driver failures become StoreError with a generic message."""

    def setup_method(self):
        self.service = QuestionService()

    @pytest.mark.asyncio
    async def test_failed_query_raises_store_error(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError(
            "SELECT", {}, Exception("connection refused")
        )

        with pytest.raises(StoreError) as exc_info:
            await self.service.get(mock_db_session, 1)

        assert "connection refused" not in exc_info.value.message
        assert "connection refused" in exc_info.value.context["detail"]
        assert exc_info.value.context["error_type"] == "OperationalError"
