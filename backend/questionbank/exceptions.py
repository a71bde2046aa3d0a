"""
Questions Unlimited Backend: Exception Hierarchy
=================================================

What:  The closed set of error kinds the question bank can produce.
How:   Every kind carries a message and an optional context dict. Services
       raise them; the handlers registered in main.py are the only place
       that turns a kind into an HTTP status code.

Exception Hierarchy:
    QuestionBankError (base)
    ├── NotFoundError            question or answer id absent
    ├── PaginationInvalidError   (page - 1) * limit beyond the row count
    ├── UnprocessableError       payload breaks a required-field invariant
    ├── NoPayloadError           update sent without a body
    ├── StoreError               the database rejected or failed a statement
    └── ConfigurationError       startup only; never reaches a handler
"""

from typing import Any, Dict, Optional


class QuestionBankError(Exception):
    """
    Base exception for all question bank errors.

    Attributes:
        message:  Client-facing description (safe to return in a response)
        context:  Debug details (logged, never returned)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class NotFoundError(QuestionBankError):
    """Raised when a question (or a question's answer) does not exist."""

    def __init__(
        self,
        resource: str = "question",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class PaginationInvalidError(QuestionBankError):
    """
    Raised when the requested page starts past the end of the table.

    A page that starts exactly at the end is valid and simply empty.
    """

    def __init__(
        self,
        page: int,
        limit: int,
        total: int,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx.update({"page": page, "limit": limit, "total": total})
        super().__init__(
            message=(
                f"Invalid query parameter values: page {page} with limit {limit} "
                f"is out of range for {total} questions"
            ),
            context=ctx,
        )
        self.page = page
        self.limit = limit
        self.total = total


class UnprocessableError(QuestionBankError):
    """Raised when a payload is well-formed JSON but violates an invariant."""

    def __init__(
        self,
        message: str = "Unprocessable entity",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NoPayloadError(QuestionBankError):
    """Raised when an update arrives without a body to apply."""

    def __init__(
        self,
        resource: str = "question",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=f"No {resource} payload was supplied", context=context)


class StoreError(QuestionBankError):
    """
    Raised when a database statement fails.

    The message returned to the client is generic; the driver error is
    kept in `context` for the server log only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConfigurationError(QuestionBankError):
    """Raised at startup when the database cannot be configured."""
