"""Create answers table

Revision ID: 002
Revises: 001
Create Date: 2026-10-17 00:00:00.000000+00:00

What:  One answer per question in practice (not enforced). The answer text
       lives in column `answer`; deleting a question deletes its answers.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "answers",
        sa.Column("id", sa.Integer(), sa.Identity(always=True), nullable=False),
        sa.Column("answer", sa.Text(), nullable=False),
        sa.Column("question_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["question_id"], ["questions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )

    # Every answer lookup is by question
    op.create_index("idx_answers_question_id", "answers", ["question_id"])


def downgrade() -> None:
    op.drop_index("idx_answers_question_id", table_name="answers")
    op.drop_table("answers")
