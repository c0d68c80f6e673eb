import logging
from dataclasses import dataclass
from typing import List, Optional

from domain.entities.product import Product, PimProduct
from interfaces.repositories.catalog_product_repository_interface import CatalogProductRepositoryInterface
from interfaces.services.execution_scope_interface import ExecutionScopeInterface
from interfaces.modifiers.data_modifier_interface import DataModifierInterface
from interfaces.listeners.product_save_listener_interface import ProductSaveListenerInterface, ProductSaveEvent


@dataclass
class SyncProductResponse:
    """
    Response data structure for a product synchronization pass.

    Attributes:
        product: Catalog product as saved
        pim_product: PIM descriptor the pass was run for
    """
    product: Product
    pim_product: PimProduct


class SyncProductUseCase:
    """
    Use case for synchronizing one PIM product into the catalog.

    The pass loads the linked catalog product, lets each data modifier
    reconcile its part of the product, saves it and finally notifies the
    save listeners. Modifiers may enqueue asset work for the drain cycle.
    """

    def __init__(self,
                 product_repository: CatalogProductRepositoryInterface,
                 modifiers: List[DataModifierInterface],
                 listeners: List[ProductSaveListenerInterface],
                 execution_scope: Optional[ExecutionScopeInterface] = None,
                 default_store_view_id: int = 0):
        """
        Initialize the product sync use case.

        Args:
            product_repository: Catalog repository for loading and saving products
            modifiers: Data modifiers run in order before the save
            listeners: Listeners notified after the save
            execution_scope: Optional scope switcher used to select the store view
            default_store_view_id: Store view used when a pass does not name one
        """
        self.product_repository = product_repository
        self.modifiers = modifiers
        self.listeners = listeners
        self.execution_scope = execution_scope
        self.default_store_view_id = default_store_view_id
        self.logger = logging.getLogger(__name__)

    async def execute(self, pim_product: PimProduct, store_view_id: Optional[int] = None) -> SyncProductResponse:
        """
        Run a synchronization pass for one product.

        Args:
            pim_product: Product descriptor published by the PIM
            store_view_id: Store view the pass applies to, the configured default when omitted

        Returns:
            SyncProductResponse: Saved product and its PIM descriptor

        Raises:
            EntityNotFoundException: If no catalog product is linked to the PIM id
        """
        if store_view_id is None:
            store_view_id = self.default_store_view_id

        if self.execution_scope is not None:
            self.execution_scope.set_current_store(store_view_id)

        product = await self.product_repository.get_by_pim_id(pim_product.pim_id)
        product.store_id = store_view_id

        for modifier in self.modifiers:
            product, pim_product = await modifier.handle(product, pim_product)

        saved_product = await self.product_repository.save(product)

        event = ProductSaveEvent(pim_product=pim_product, product=saved_product)
        for listener in self.listeners:
            await listener.execute(event)

        self.logger.info(f"Synchronized PIM product {pim_product.pim_id} into catalog product {saved_product.sku}")

        return SyncProductResponse(product=saved_product, pim_product=pim_product)
