"""
Questions Unlimited Backend: Services Layer
============================================

What:  The question bank's rules, between the routes (HTTP) and the ORM.

Service Inventory:
    - QuestionService: get, paginate, list, random pick, add, update, delete
    - AnswerService:   get, add, update, delete for a question's answer

Services receive the request's AsyncSession on every call and keep no
per-request state. They raise the exceptions in questionbank.exceptions
and never choose status codes.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError

from questionbank.exceptions import StoreError

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(action: str, context: Optional[Dict[str, Any]] = None) -> Iterator[None]:
    """
    Re-raise any SQLAlchemyError inside the block as StoreError.

    The driver message goes to the log and to StoreError.context, never
    into the client-facing message.
    """
    try:
        yield
    except SQLAlchemyError as e:
        ctx = dict(context or {})
        ctx["error_type"] = type(e).__name__
        ctx["detail"] = str(getattr(e, "orig", None) or e)
        logger.error("Database error while trying to %s: %s", action, ctx["detail"])
        raise StoreError(
            message=f"Could not {action}. Please check the request and try again.",
            context=ctx,
        ) from e
