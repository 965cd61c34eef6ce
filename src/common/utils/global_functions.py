# common/utils/global_functions.py
from datetime import datetime, timezone

from fastapi import HTTPException

from src.common.utils.errors import MatchingError


def utc_now() -> datetime:
    """Current time in UTC. Services take an optional ``now`` and fall back to this."""
    return datetime.now(timezone.utc)


def to_http_exception(error: MatchingError) -> HTTPException:
    """Translate a domain error into the HTTPException a controller raises."""
    return HTTPException(status_code=error.status_code, detail=error.message)
