from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction

from allocation.core.errors import ErrorKind
from allocation.core.result import Result

log = logging.getLogger(__name__)


class StepName(str, Enum):
    UpdateListing = "update-listing"
    UpdateApplicant = "update-applicant"
    UpdateOffer = "update-offer"
    WriteAudit = "write-audit"


StepFn = Callable[[AsyncSession], Awaitable[Result[Any, Any]]]


@dataclass(frozen=True)
class TransactionStep:
    name: StepName
    run: StepFn


async def _rollback(tx: AsyncSessionTransaction) -> None:
    try:
        await tx.rollback()
    except Exception:
        log.exception("transaction: rollback failed")


async def run_in_transaction(
    db: AsyncSession,
    steps: Sequence[TransactionStep],
    *,
    context: dict[str, Any] | None = None,
) -> Result[None, str]:
    """
    Run steps in order against one transactional unit.

    - If the session has no transaction yet, a real transaction is opened and
      committed here. Otherwise a SAVEPOINT is used and the caller commits the
      outer transaction (same as any other flush in a request).
    - The first failing step (err result or raised exception) rolls the unit
      back and is reported by name. Nothing is retried.
    - Failures outside of a step are reported as 'unknown'.
    """
    ctx = context or {}
    nested = db.in_transaction()
    try:
        tx = await (db.begin_nested() if nested else db.begin())
    except Exception:
        log.exception("transaction: could not begin (%s)", ctx)
        return Result.failure(ErrorKind.Unknown.value)

    for step in steps:
        try:
            res = await step.run(db)
        except Exception:
            log.exception("transaction: step %s raised (%s)", step.name.value, ctx)
            res = Result.failure(ErrorKind.Unknown.value)

        if not res.ok:
            log.warning("transaction: step %s failed with %s, rolling back (%s)", step.name.value, res.err, ctx)
            await _rollback(tx)
            return Result.failure(step.name.value)

    try:
        await tx.commit()
    except Exception:
        log.exception("transaction: commit failed (%s)", ctx)
        await _rollback(tx)
        return Result.failure(ErrorKind.Unknown.value)

    return Result.success(None)
