# common/utils/errors.py
"""Errors raised by the matching, response and request services.

Every error is scoped to the single operation that raised it. Controllers turn
them into HTTP responses; the services never retry on their own.
"""

from typing import Optional

from src.common.utils.global_messages import GlobalMessages


class MatchingError(Exception):
    """Base class for domain errors carrying a user-facing message."""

    status_code = 400
    default_message = "The operation could not be completed."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(MatchingError):
    """The referenced appointment, request, donor or clinic does not exist."""

    status_code = 404
    default_message = GlobalMessages.RECORD_NOT_FOUND


class AlreadyResolved(MatchingError):
    """The record's status no longer matches the expected precondition."""

    status_code = 409
    default_message = GlobalMessages.ALREADY_RESOLVED


class ValidationError(MatchingError):
    """A required field is missing or invalid."""

    status_code = 422
    default_message = GlobalMessages.INVALID_INPUT


class PartialWriteFailure(MatchingError):
    """The batch commit failed; none of its writes were applied."""

    status_code = 500
    default_message = GlobalMessages.WRITE_FAILED
