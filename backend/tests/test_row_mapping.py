"""
Row mapping and schema validation tests (no database).
"""

import pytest
from pydantic import ValidationError

from questionbank.schemas.question import (
    AnswerIn,
    QuestionIn,
    answer_from_row,
    normalize_tags,
    questions_from_rows,
)


class TestQuestionsFromRows:

    def test_groups_tags_by_question(self):
        rows = [
            (1, "Capital", "Capital of France?", "geo"),
            (1, "Capital", "Capital of France?", "europe"),
            (2, "Moon", "Who walked first?", "history"),
        ]

        questions = questions_from_rows(rows)

        assert [q.id for q in questions] == [1, 2]
        assert questions[0].tags == ["europe", "geo"]
        assert questions[1].tags == ["history"]

    def test_untagged_question(self):
        """A LEFT JOIN miss yields tag_name None and no tags."""
        questions = questions_from_rows([(3, "T", "C", None)])
        assert questions[0].tags is None

    def test_first_seen_order_is_kept(self):
        rows = [(5, "E", "e", None), (2, "B", "b", None), (5, "E", "e", "x")]
        questions = questions_from_rows(rows)

        assert [q.id for q in questions] == [5, 2]
        assert questions[0].tags == ["x"]

    def test_duplicate_tag_names_collapse(self):
        rows = [(1, "T", "C", "geo"), (1, "T", "C", "geo")]
        assert questions_from_rows(rows)[0].tags == ["geo"]

    def test_mapping_rows(self):
        rows = [{"id": 1, "title": "T", "content": "C", "tag_name": "a"}]
        assert questions_from_rows(rows)[0].title == "T"

    def test_no_rows(self):
        assert questions_from_rows([]) == []


class TestAnswerFromRow:

    def test_tuple_row(self):
        answer = answer_from_row((7, "Paris", 1))
        assert (answer.id, answer.content, answer.question_id) == (7, "Paris", 1)


class TestQuestionIn:

    def test_normalize_tags(self):
        assert normalize_tags([" b", "a", "", "b "]) == ["a", "b"]
        assert normalize_tags(["  "]) is None
        assert normalize_tags(None) is None

    @pytest.mark.parametrize("field", ["title", "content"])
    def test_blank_fields_rejected(self, field):
        payload = {"title": "T", "content": "C", field: "   "}
        with pytest.raises(ValidationError):
            QuestionIn(**payload)

    def test_missing_content_rejected(self):
        with pytest.raises(ValidationError):
            QuestionIn(title="T")


class TestAnswerIn:

    def test_accepts_both_spellings(self):
        assert AnswerIn.model_validate({"content": "Paris"}).content == "Paris"
        assert AnswerIn.model_validate({"answer": "Paris"}).content == "Paris"

    def test_empty_answer_rejected(self):
        with pytest.raises(ValidationError):
            AnswerIn.model_validate({"answer": ""})
