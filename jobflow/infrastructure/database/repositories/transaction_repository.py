"""
Transaction boundary shared by the workflow use cases.
"""

from typing import Awaitable, Callable, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from jobflow.config.logging import get_logger
from jobflow.domain.exceptions.workflow_error import JobWorkflowError

logger = get_logger(__name__)

T = TypeVar("T")


class TransactionService:
    """Unit of work around one workflow operation.

    Every use case runs through ``execute_in_transaction`` so its reads,
    writes and outbox events commit or roll back together.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def execute_in_transaction(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation``, commit on success and roll back on any error."""
        try:
            result = await operation()
            await self.session.commit()
        except JobWorkflowError as e:
            await self.session.rollback()
            # Refusals are normal traffic
            logger.info("Workflow operation refused", error_code=e.code, error=e.message)
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Workflow operation rolled back", error=str(e), exc_info=True)
            raise

        return result
