"""
Questions Unlimited Backend: Pydantic Request/Response Schemas
===============================================================

What:  The API contract for questions, answers and errors, plus the pure
       functions that turn query rows into response models.
How:   FastAPI validates request bodies against the *In models, serializes
       the *Out models, and builds the OpenAPI document from both.

Row Mapping:
    Reads select flat join rows, one per (question, tag) pair:

        (id, title, content, tag_name)      tag_name is None when untagged

    `questions_from_rows` folds those rows back into one QuestionOut per id.
    It touches no database objects, so it is tested on plain tuples.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from pydantic import AliasChoices, BaseModel, Field, field_validator

# Ids are PostgreSQL INTEGER (int4) columns
MAX_ID = 2**31 - 1


# ══════════════════════════════════════════════════════════════════════════
# Question Models
# ══════════════════════════════════════════════════════════════════════════


def normalize_tags(tags: Optional[Iterable[str]]) -> Optional[List[str]]:
    """
    Strip, drop blanks and de-duplicate tag names.

    Returns a sorted list, or None when nothing is left. Tags have set
    semantics: order is never meaningful.
    """
    if tags is None:
        return None
    cleaned = {tag.strip() for tag in tags if tag and tag.strip()}
    return sorted(cleaned) or None


class QuestionIn(BaseModel):
    """
    What:  Body of POST /questions/add and PUT /questions/{id}.

    `id` is accepted so clients can send back what they received; the
    stored id always comes from the database (or the URL on update).
    """
    id: Optional[int] = Field(default=None, description="Ignored on create; must match the URL on update")
    title: str = Field(min_length=1, description="Short question title", examples=["Capital"])
    content: str = Field(min_length=1, description="The question itself", examples=["Capital of France?"])
    tags: Optional[List[str]] = Field(
        default=None,
        description="Tag names; duplicates are collapsed",
        examples=[["geography", "europe"]],
    )

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Whitespace-only titles/contents are rejected like empty ones."""
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return normalize_tags(v)


class QuestionOut(BaseModel):
    """
    What:  A stored question with its tag names.

    `tags` is omitted from JSON for untagged questions (the routes use
    response_model_exclude_none).
    """
    id: int = Field(description="Identifier generated by the database")
    title: str
    content: str
    tags: Optional[List[str]] = Field(default=None, description="Sorted tag names")

    model_config = {"from_attributes": True}


# ══════════════════════════════════════════════════════════════════════════
# Answer Models
# ══════════════════════════════════════════════════════════════════════════


class AnswerIn(BaseModel):
    """
    What:  Body of POST/PUT /questions/{id}/answer.

    Older clients send the text as `answer`; both spellings are accepted.
    """
    id: Optional[int] = Field(default=None, description="Ignored; ids are generated")
    content: str = Field(
        min_length=1,
        validation_alias=AliasChoices("content", "answer"),
        examples=["Paris"],
    )
    question_id: Optional[int] = Field(
        default=None,
        description="Optional; must match the question id in the URL when given",
    )


class AnswerOut(BaseModel):
    """A stored answer."""
    id: int
    content: str
    question_id: int

    model_config = {"from_attributes": True}


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Body of every error response.

    Example:
        {"status": "404 Not Found", "error": "question with ID '9' was not found", "request_id": "1a2b3c4d"}
    """
    status: str = Field(description="Status code and reason phrase, e.g. \"404 Not Found\"")
    error: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health."""
    status: str = Field(description="healthy or unhealthy")
    version: str
    database: str = Field(description="connected or disconnected")
    uptime_seconds: float


# ══════════════════════════════════════════════════════════════════════════
# Row → Model Mapping
# ══════════════════════════════════════════════════════════════════════════

Row = Union[Sequence[Any], Mapping[str, Any]]


def _row_values(row: Row, names: Sequence[str]) -> List[Any]:
    """Read columns by name from a mapping/Row._mapping, else by position."""
    mapping = getattr(row, "_mapping", row)
    if isinstance(mapping, Mapping):
        return [mapping[name] for name in names]
    return list(row)[: len(names)]


def questions_from_rows(rows: Iterable[Row]) -> List[QuestionOut]:
    """
    Fold (id, title, content, tag_name) join rows into QuestionOut models.

    - Output order is the first-seen order of ids (queries sort by id)
    - Repeated ids contribute only their tag name
    - A None tag name (LEFT JOIN with no match) adds nothing
    - Duplicate tag names collapse; each tag list comes out sorted
    """
    grouped: Dict[int, Dict[str, Any]] = {}
    for row in rows:
        question_id, title, content, tag_name = _row_values(
            row, ("id", "title", "content", "tag_name")
        )
        entry = grouped.get(question_id)
        if entry is None:
            entry = {"id": question_id, "title": title, "content": content, "tags": set()}
            grouped[question_id] = entry
        if tag_name is not None:
            entry["tags"].add(tag_name)

    return [
        QuestionOut(
            id=entry["id"],
            title=entry["title"],
            content=entry["content"],
            tags=sorted(entry["tags"]) or None,
        )
        for entry in grouped.values()
    ]


def answer_from_row(row: Row) -> AnswerOut:
    """Map an (id, content, question_id) record to an AnswerOut."""
    answer_id, content, question_id = _row_values(row, ("id", "content", "question_id"))
    return AnswerOut(id=answer_id, content=content, question_id=question_id)
