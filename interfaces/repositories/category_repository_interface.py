from abc import ABC, abstractmethod


class CategoryRepositoryInterface(ABC):
    """Repository interface for catalog categories consumed by the link listener."""

    @abstractmethod
    async def invalidate_products_position(self, category_id: int) -> None:
        """
        Drop the cached product position data of a category.

        The bulk link assignment reads this cache, so it must be invalidated
        before links are reassigned.

        Args:
            category_id: Catalog category identifier
        """
        pass
