import logging

from interfaces.listeners.product_save_listener_interface import ProductSaveListenerInterface, ProductSaveEvent
from interfaces.repositories.category_repository_interface import CategoryRepositoryInterface
from interfaces.gateways.category_link_gateway_interface import CategoryLinkGatewayInterface


class CategoryLinkListener(ProductSaveListenerInterface):
    """
    Links a saved product to the categories published by the PIM.

    Every category's cached product positions are invalidated before the
    bulk assignment, which otherwise reads stale ordering data.
    """

    def __init__(self,
                 category_repository: CategoryRepositoryInterface,
                 category_link_gateway: CategoryLinkGatewayInterface):
        self.category_repository = category_repository
        self.category_link_gateway = category_link_gateway
        self.logger = logging.getLogger(__name__)

    async def execute(self, event: ProductSaveEvent) -> None:
        category_ids = event.pim_product.category_ids

        for category_id in category_ids:
            await self.category_repository.invalidate_products_position(category_id)

        await self.category_link_gateway.assign_product_to_categories(event.product.sku, category_ids)

        event.product.category_ids = category_ids
        self.logger.debug(f"Assigned product {event.product.sku} to categories {category_ids}")
