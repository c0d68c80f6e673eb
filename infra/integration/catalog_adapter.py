import importlib
import logging
from dataclasses import dataclass

from domain.exceptions import ConfigurationException
from interfaces.repositories.catalog_product_repository_interface import CatalogProductRepositoryInterface
from interfaces.repositories.category_repository_interface import CategoryRepositoryInterface
from interfaces.gateways.category_link_gateway_interface import CategoryLinkGatewayInterface
from interfaces.services.execution_scope_interface import ExecutionScopeInterface

logger = logging.getLogger(__name__)


@dataclass
class CatalogAdapter:
    """
    Bundle of catalog collaborators supplied by the catalog integration.

    The catalog platform owns products and categories; deployments provide
    these implementations through a factory named in ``CATALOG_ADAPTER``.
    """
    product_repository: CatalogProductRepositoryInterface
    category_repository: CategoryRepositoryInterface
    category_link_gateway: CategoryLinkGatewayInterface
    execution_scope: ExecutionScopeInterface


def load_catalog_adapter(import_path: str) -> CatalogAdapter:
    """
    Build the catalog adapter from a ``module:factory`` import path.

    Args:
        import_path: Dotted module path and factory callable separated by a colon

    Returns:
        CatalogAdapter: Adapter returned by the factory

    Raises:
        ConfigurationException: If the path is empty, cannot be imported or the factory returns something else
    """
    if not import_path or ":" not in import_path:
        raise ConfigurationException(
            f"Catalog adapter must be configured as 'module:factory', got '{import_path}'"
        )

    module_name, factory_name = import_path.split(":", 1)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationException(f"Cannot import catalog adapter module '{module_name}': {str(e)}")

    factory = getattr(module, factory_name, None)
    if factory is None or not callable(factory):
        raise ConfigurationException(f"Catalog adapter factory '{factory_name}' not found in '{module_name}'")

    adapter = factory()
    if not isinstance(adapter, CatalogAdapter):
        raise ConfigurationException(
            f"Catalog adapter factory '{import_path}' returned {type(adapter).__name__}, expected CatalogAdapter"
        )

    logger.info(f"Loaded catalog adapter from {import_path}")
    return adapter
