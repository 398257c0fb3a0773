"""PostgreSQL transaction boundary.

Implements ITransactionExecutor with ``database_transaction``: the block
runs with the transaction's connection bound to the current task, so any
repository it calls joins the same transaction.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

from ...api.database import RollbackRequested, database_transaction
from ..domain.errors import TransactionFailure
from ..domain.ports import ITransactionExecutor
from ..domain.result import Err, Ok, Result

if TYPE_CHECKING:
    import asyncpg

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PostgresTransactionExecutor(ITransactionExecutor):
    """Runs each unit of work in its own database transaction."""

    def __init__(self, pool: "asyncpg.Pool"):
        self.pool = pool

    async def execute_in_transaction(
        self,
        block: Callable[[], Awaitable[Result[T, Any]]],
    ) -> Result[T, TransactionFailure]:
        try:
            async with database_transaction(self.pool):
                result = await block()
                if isinstance(result, Err):
                    raise RollbackRequested(result.error)
        except RollbackRequested as e:
            error = e.payload
            return Err(
                TransactionFailure(
                    "Transaction execution failed due to domain error",
                    cause=error if isinstance(error, BaseException) else None,
                )
            )
        except Exception as e:
            logger.error(f"Transaction execution failed: {e}")
            return Err(TransactionFailure(f"Transaction execution failed: {e}", cause=e))

        return Ok(result.value)
