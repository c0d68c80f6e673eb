from abc import ABC, abstractmethod
from typing import Tuple
from domain.entities.product import Product, PimProduct


class DataModifierInterface(ABC):
    """
    Step of a product sync pass that reconciles one aspect of a catalog product.

    Modifiers run in order on the same in-memory product before it is saved.
    """

    @abstractmethod
    async def handle(self, product: Product, pim_product: PimProduct) -> Tuple[Product, PimProduct]:
        """
        Reconcile the catalog product with the PIM descriptor.

        Args:
            product: Catalog product, may be mutated in place
            pim_product: PIM descriptor, never mutated

        Returns:
            Tuple[Product, PimProduct]: Product and descriptor for the next modifier
        """
        pass
