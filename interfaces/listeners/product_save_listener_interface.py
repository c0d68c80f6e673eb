from abc import ABC, abstractmethod
from dataclasses import dataclass
from domain.entities.product import Product, PimProduct


@dataclass
class ProductSaveEvent:
    """Event raised after a synchronized product has been saved."""
    pim_product: PimProduct
    product: Product


class ProductSaveListenerInterface(ABC):
    """Listener interface notified after the product sync pass saved a product."""

    @abstractmethod
    async def execute(self, event: ProductSaveEvent) -> None:
        """
        React to a saved product.

        Args:
            event: Saved product and the PIM descriptor it was built from
        """
        pass
