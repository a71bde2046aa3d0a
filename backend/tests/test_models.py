"""
Questions Unlimited Backend: Model DDL Tests
=============================================

What:  The ORM models describe the same PostgreSQL schema as the Alembic
       migrations, so `create_tables()` and `alembic upgrade` agree.

What we test:
    ✅ questions, tags and answers ids are GENERATED ALWAYS AS IDENTITY
    ✅ question_tags has a composite key and no generated column
    ✅ Every foreign key cascades on delete
"""

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateTable

from questionbank.models import Answer, Question, Tag, question_tags


def postgres_ddl(table) -> str:
    return str(CreateTable(table).compile(dialect=postgresql.dialect()))


class TestModelDDL:

    @pytest.mark.parametrize("model", [Question, Tag, Answer])
    def test_ids_are_always_generated(self, model):
        ddl = postgres_ddl(model.__table__)
        assert "id INTEGER GENERATED ALWAYS AS IDENTITY" in ddl

    def test_junction_table_has_no_identity(self):
        ddl = postgres_ddl(question_tags)

        assert "IDENTITY" not in ddl
        assert "PRIMARY KEY (question_id, tag_id)" in ddl

    @pytest.mark.parametrize("table", [question_tags, Answer.__table__])
    def test_foreign_keys_cascade(self, table):
        assert table.foreign_keys
        assert {fk.ondelete for fk in table.foreign_keys} == {"CASCADE"}
