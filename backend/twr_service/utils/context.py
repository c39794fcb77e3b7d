# backend/twr_service/utils/context.py
"""
Request context for the Time-Weighted Return service.

Holds the correlation ID of the request being served so log records emitted
deep inside the calculation can be tied back to the HTTP call that caused
them.

Uses contextvars, which are isolated per thread and per asyncio task. FastAPI
copies the context into the threadpool running sync endpoints, so a value set
by the middleware is visible inside the calculator.

Usage:
    from twr_service.utils.context import get_correlation_id, set_correlation_id

    # In middleware
    token = set_correlation_id("abc-123")
    ...
    reset_correlation_id(token)

    # In any service/handler
    correlation_id = get_correlation_id()  # Returns "abc-123"
"""

from contextvars import ContextVar, Token

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str | None:
    """
    Get the current request's correlation ID.

    Returns:
        The correlation ID for the current request, or None outside a request.
    """
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> Token:
    """
    Set the correlation ID for the current context.

    Args:
        correlation_id: Unique identifier for this request

    Returns:
        Token restoring the previous value when passed to reset_correlation_id()
    """
    return _correlation_id_var.set(correlation_id)


def reset_correlation_id(token: Token) -> None:
    """Restore the correlation ID that was active before set_correlation_id()."""
    _correlation_id_var.reset(token)
