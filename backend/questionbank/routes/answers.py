"""
Answer route handlers.

All four verbs address the answer through its question:
/questions/{question_id}/answer.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Path, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from questionbank.database import get_db_session
from questionbank.schemas.question import MAX_ID, AnswerIn, AnswerOut, ErrorResponse
from questionbank.services.answer_service import answer_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Answers"])


@router.get(
    "/questions/{question_id}/answer",
    response_model=AnswerOut,
    responses={404: {"description": "No answer for this question", "model": ErrorResponse}},
    summary="Get a question's answer",
)
async def get_answer(
    question_id: int = Path(ge=1, le=MAX_ID, description="Question id"),
    db: AsyncSession = Depends(get_db_session),
) -> AnswerOut:
    return await answer_service.get(db, question_id)


@router.post(
    "/questions/{question_id}/answer",
    status_code=status.HTTP_201_CREATED,
    response_model=AnswerOut,
    responses={
        400: {"description": "Bad request (e.g. unknown question)", "model": ErrorResponse},
        422: {"description": "question_id in body does not match the URL", "model": ErrorResponse},
    },
    summary="Add an answer to a question",
)
async def add_answer(
    answer: AnswerIn,
    question_id: int = Path(ge=1, le=MAX_ID, description="Question id"),
    db: AsyncSession = Depends(get_db_session),
) -> AnswerOut:
    return await answer_service.add(db, question_id, answer)


@router.put(
    "/questions/{question_id}/answer",
    response_model=AnswerOut,
    responses={
        400: {"description": "Bad request", "model": ErrorResponse},
        404: {"description": "Answer not found or no payload", "model": ErrorResponse},
        422: {"description": "Unprocessable entity", "model": ErrorResponse},
    },
    summary="Update a question's answer",
)
async def update_answer(
    question_id: int = Path(ge=1, le=MAX_ID, description="Question id"),
    answer: Optional[AnswerIn] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> AnswerOut:
    return await answer_service.update(db, question_id, answer)


@router.delete(
    "/questions/{question_id}/answer",
    status_code=status.HTTP_200_OK,
    responses={400: {"description": "Bad request", "model": ErrorResponse}},
    summary="Delete a question's answer",
)
async def delete_answer(
    question_id: int = Path(ge=1, le=MAX_ID, description="Question id"),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await answer_service.delete(db, question_id)
    return Response(status_code=status.HTTP_200_OK)
