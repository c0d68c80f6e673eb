from abc import ABC, abstractmethod
from typing import Optional
from domain.entities.queue_entry import QueueEntry
from domain.value_objects import ActionResult, ExecutionContext


class AssetHandlerStrategyInterface(ABC):
    """
    Strategy interface for type specific asset synchronization.

    A strategy executes one asset queue entry against the catalog and reports
    the outcome. Business conditions (missing API key, provider errors, duplicate
    work) are reported through the returned ActionResult; broken infrastructure
    and caller bugs are raised.
    """

    @abstractmethod
    async def execute(self, context: ExecutionContext, entry: Optional[QueueEntry]) -> ActionResult:
        """
        Execute a queue entry.

        Args:
            context: Execution scope to run in
            entry: Asset queue entry to synchronize

        Returns:
            ActionResult: SUCCESS, SKIPPED or ERROR

        Raises:
            ConfigurationException: If no entry is supplied
            NotYetPublishedException: If the target product is unknown and nothing will import it
        """
        pass
