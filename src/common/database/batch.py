# src/common/database/batch.py
"""Atomic multi-row writes.

One logical event (a match, a donor response, a clinic action) touches the
appointment, the patient request and a handful of notifications. Services
describe those writes as a list of operations and hand them to
``commit_batch``, which applies them inside the session's transaction and
commits them together. Either every write lands or none does.

Counters are only ever changed with ``Increment`` (``col = col + delta`` in
SQL) and status transitions with ``UpdateIf``, which matches on the status the
caller observed so a concurrent transition makes the whole batch fail instead
of being overwritten.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.common.utils.errors import (
    AlreadyResolved, MatchingError, NotFound, PartialWriteFailure
)

logger = logging.getLogger(__name__)


def _update(model):
    # Rows are re-read after commit, so skip syncing objects already in the session
    return update(model).execution_options(synchronize_session=False)


@dataclass
class Insert:
    """Add a new row."""
    instance: Any

    async def apply(self, session: AsyncSession) -> None:
        session.add(self.instance)


@dataclass
class Update:
    """Set fields on one row by primary key."""
    model: Any
    id: UUID
    values: Dict[str, Any]

    async def apply(self, session: AsyncSession) -> None:
        await session.execute(
            _update(self.model).where(self.model.id == self.id).values(**self.values)
        )


@dataclass
class UpdateWhere:
    """Set fields on every row matching the criteria (may match none)."""
    model: Any
    criteria: Sequence[Any]
    values: Dict[str, Any]

    async def apply(self, session: AsyncSession) -> None:
        await session.execute(
            _update(self.model).where(*self.criteria).values(**self.values)
        )


@dataclass
class Increment:
    """Atomically add deltas to integer columns of one row."""
    model: Any
    id: UUID
    deltas: Dict[str, int]

    async def apply(self, session: AsyncSession) -> None:
        values = {
            name: getattr(self.model, name) + delta
            for name, delta in self.deltas.items()
        }
        result = await session.execute(
            _update(self.model).where(self.model.id == self.id).values(**values)
        )
        if result.rowcount == 0:
            raise NotFound()


@dataclass
class UpdateIf:
    """Set fields on one row only while it still holds the expected values.

    ``criteria`` adds SQL conditions for guards an equality cannot express.
    """
    model: Any
    id: UUID
    expected: Dict[str, Any]
    values: Dict[str, Any]
    message: Optional[str] = field(default=None)
    criteria: Sequence[Any] = field(default=())

    async def apply(self, session: AsyncSession) -> None:
        conditions = [getattr(self.model, name) == value for name, value in self.expected.items()]
        conditions.extend(self.criteria)
        result = await session.execute(
            _update(self.model)
            .where(self.model.id == self.id, *conditions)
            .values(**self.values)
        )
        if result.rowcount == 0:
            raise AlreadyResolved(self.message)


async def commit_batch(session: AsyncSession, operations: List[Any]) -> None:
    """Apply all operations and commit them as one transaction.

    Raises the operation's own ``MatchingError`` when a guard fails and
    ``PartialWriteFailure`` when the database rejects any write. Any error,
    those two included, rolls the transaction back.
    """
    try:
        for operation in operations:
            await operation.apply(session)
        await session.commit()
    except MatchingError:
        await session.rollback()
        raise
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception("Batch of %d writes failed and was rolled back", len(operations))
        raise PartialWriteFailure() from e
    except Exception:
        await session.rollback()
        raise
