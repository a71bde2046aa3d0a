"""
Questions Unlimited Backend: Question Route Handlers
=====================================================

What:  REST endpoints for questions under the API prefix (default /api/v1).
How:   Extract path/query/body, delegate to QuestionService, return JSON.
       Errors raised by the service are rendered by the handlers in main.py.

Route Inventory:
    GET    /questions                 all questions (204 when the bank is empty)
    GET    /questions?page=&limit=    one page (404 when the page is out of range)
    GET    /question                  one random question (204 when empty)
    GET    /questions/{id}            one question
    POST   /questions/add             create        → 201
    PUT    /questions/{id}            replace       → 200
    DELETE /questions/{id}            delete        → 200
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from questionbank.config import settings
from questionbank.database import get_db_session
from questionbank.schemas.question import MAX_ID, ErrorResponse, QuestionIn, QuestionOut
from questionbank.services.question_service import question_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Questions"])

TOTAL_COUNT_HEADER = "X-Total-Count"


@router.get(
    "/questions",
    response_model=List[QuestionOut],
    response_model_exclude_none=True,
    responses={
        200: {"description": "List of questions in ascending id order"},
        204: {"description": "The question bank is empty (no pagination requested)"},
        404: {"description": "No questions in that range", "model": ErrorResponse},
    },
    summary="List questions, optionally one page at a time",
)
async def list_questions(
    response: Response,
    page: Optional[int] = Query(default=None, ge=1, description="1-based page number"),
    limit: Optional[int] = Query(
        default=None,
        ge=1,
        le=settings.max_page_size,
        description="Questions per page",
    ),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Without `page` and `limit` every question is returned. With either of
    them the list is paginated; the missing one defaults to page 1 or
    `DEFAULT_PAGE_SIZE`. The total row count is sent in `X-Total-Count`.
    """
    if page is None and limit is None:
        questions = await question_service.list_all(db)
        if not questions:
            return Response(status_code=status.HTTP_204_NO_CONTENT)
        response.headers[TOTAL_COUNT_HEADER] = str(len(questions))
        return questions

    page = page or 1
    limit = limit or settings.default_page_size

    questions, total = await question_service.paginated_get(db, page=page, limit=limit)
    response.headers[TOTAL_COUNT_HEADER] = str(total)
    return questions


@router.get(
    "/question",
    response_model=QuestionOut,
    response_model_exclude_none=True,
    responses={
        200: {"description": "A random question"},
        204: {"description": "The question bank is empty"},
    },
    summary="Get a random question",
)
async def random_question(db: AsyncSession = Depends(get_db_session)):
    question = await question_service.get_random(db)
    if question is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return question


@router.get(
    "/questions/{question_id}",
    response_model=QuestionOut,
    response_model_exclude_none=True,
    responses={404: {"description": "No question with this id", "model": ErrorResponse}},
    summary="Get a question by id",
)
async def get_question(
    question_id: int = Path(ge=1, le=MAX_ID, description="Question id"),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionOut:
    return await question_service.get(db, question_id)


@router.post(
    "/questions/add",
    status_code=status.HTTP_201_CREATED,
    response_model=QuestionOut,
    response_model_exclude_none=True,
    responses={400: {"description": "Bad request", "model": ErrorResponse}},
    summary="Add a question",
)
async def add_question(
    question: QuestionIn,
    db: AsyncSession = Depends(get_db_session),
) -> QuestionOut:
    """Stores the question and its tags; returns it with the generated id."""
    return await question_service.add(db, question)


@router.put(
    "/questions/{question_id}",
    response_model=QuestionOut,
    response_model_exclude_none=True,
    responses={
        400: {"description": "Bad request", "model": ErrorResponse},
        404: {"description": "Question not found or no payload", "model": ErrorResponse},
        422: {"description": "Unprocessable entity", "model": ErrorResponse},
    },
    summary="Update a question",
)
async def update_question(
    question_id: int = Path(ge=1, le=MAX_ID, description="Question id"),
    question: Optional[QuestionIn] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> QuestionOut:
    """Replaces title, content and the complete tag set."""
    return await question_service.update(db, question_id, question)


@router.delete(
    "/questions/{question_id}",
    status_code=status.HTTP_200_OK,
    responses={400: {"description": "Bad request", "model": ErrorResponse}},
    summary="Delete a question",
)
async def delete_question(
    question_id: int = Path(ge=1, le=MAX_ID, description="Question id"),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """Removes the question, its tag links and its answer."""
    await question_service.delete(db, question_id)
    return Response(status_code=status.HTTP_200_OK)
