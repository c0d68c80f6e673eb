from abc import ABC, abstractmethod
from domain.value_objects import ExecutionArea


class ExecutionScopeInterface(ABC):
    """
    Service interface selecting the catalog scope handlers run in.

    Catalog calls made after apply_area and set_current_store run with the
    chosen privilege area and storefront.
    """

    @abstractmethod
    def apply_area(self, area: ExecutionArea) -> None:
        """
        Switch the catalog client to a privilege area.

        Args:
            area: Area to run in, admin for queue handlers
        """
        pass

    @abstractmethod
    def set_current_store(self, store_view_id: int) -> None:
        """
        Select the storefront scope for subsequent catalog calls.

        Args:
            store_view_id: Store view identifier taken from the queue entry
        """
        pass
