"""
Questions Unlimited Backend: Health Check Route
================================================

What:  GET /health for Docker health checks and load balancers.
How:   Pings the database through the app's QuestionBank.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from questionbank import __version__
from questionbank.database import QuestionBank, get_question_bank
from questionbank.schemas.question import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(bank: QuestionBank = Depends(get_question_bank)):
    """Runs `SELECT 1` and reports version and uptime."""
    health = HealthResponse(
        status="healthy",
        version=__version__,
        database="connected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )

    try:
        await bank.ping()
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Health check: database unreachable: %s", str(e))
        health.status = "unhealthy"
        health.database = "disconnected"
        return JSONResponse(status_code=503, content=health.model_dump())

    return health
