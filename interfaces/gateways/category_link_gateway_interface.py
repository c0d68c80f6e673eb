from abc import ABC, abstractmethod
from typing import List


class CategoryLinkGatewayInterface(ABC):
    """Gateway interface for the catalog's bulk category link operation."""

    @abstractmethod
    async def assign_product_to_categories(self, sku: str, category_ids: List[int]) -> None:
        """
        Replace the category links of a product.

        Args:
            sku: Catalog product SKU
            category_ids: Complete list of categories the product belongs to
        """
        pass
