from abc import ABC, abstractmethod
from domain.entities.product import Product


class CatalogProductRepositoryInterface(ABC):
    """
    Repository interface for products of the downstream catalog system.

    The catalog owns product persistence; this contract only covers the two
    calls the synchronization needs.
    """

    @abstractmethod
    async def get_by_pim_id(self, pim_id: str) -> Product:
        """
        Load the catalog product linked to a PIM identifier.

        Args:
            pim_id: PIM side product identifier

        Returns:
            Product: Catalog product in the currently selected store

        Raises:
            EntityNotFoundException: If no catalog product is linked to the PIM id
        """
        pass

    @abstractmethod
    async def save(self, product: Product) -> Product:
        """
        Persist a product including its media gallery.

        Args:
            product: Product to save

        Returns:
            Product: Saved product, new media gallery entries carry their ids

        Raises:
            InputException: If the catalog rejects the product data
        """
        pass
