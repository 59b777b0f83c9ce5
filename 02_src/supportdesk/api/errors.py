"""Mapping of domain errors to HTTP responses."""

from fastapi import HTTPException

from ..errors import (
    ActiveTicketConflictError,
    AuthenticationError,
    ConversationClosedError,
    ConversationNotFoundError,
    InvalidRatingError,
    InvalidTransitionError,
    SupportDeskError,
)

STATUS_CODES: list[tuple[type[SupportDeskError], int]] = [
    (ConversationNotFoundError, 404),
    (ActiveTicketConflictError, 409),
    (InvalidTransitionError, 409),
    (ConversationClosedError, 409),
    (InvalidRatingError, 400),
    (AuthenticationError, 401),
]


def http_error(error: SupportDeskError) -> HTTPException:
    """HTTPException carrying the status code for a domain error."""
    for error_type, status_code in STATUS_CODES:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=400, detail=str(error))
