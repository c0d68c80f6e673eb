import logging
from typing import Dict

from domain.value_objects import AssetFamily, TypeMetadata
from domain.exceptions import UnsupportedTypeException
from interfaces.strategies.asset_handler_strategy_interface import AssetHandlerStrategyInterface


class AssetStrategyDispatcher:
    """
    Routes queue entries to the asset handler registered for their family.

    The type metadata token is decoded into an explicit AssetKind first, so
    unknown tags are rejected instead of falling through to a handler that
    happens to match a substring.
    """

    def __init__(self):
        self._strategies: Dict[AssetFamily, AssetHandlerStrategyInterface] = {}
        self.logger = logging.getLogger(__name__)

    def register(self, family: AssetFamily, strategy: AssetHandlerStrategyInterface) -> None:
        self._strategies[family] = strategy
        self.logger.info(f"Registered {type(strategy).__name__} for asset family '{family.value}'")

    def resolve(self, type_metadata: str) -> AssetHandlerStrategyInterface:
        """
        Resolve the handler for an encoded type metadata token.

        Args:
            type_metadata: Encoded token stored on the queue entry

        Returns:
            AssetHandlerStrategyInterface: Registered handler for the token's asset family

        Raises:
            FormatException: If the token is malformed
            UnsupportedTypeException: If the asset kind is unknown or its family has no handler
        """
        metadata = TypeMetadata.decode(type_metadata)
        family = metadata.asset_kind().family

        strategy = self._strategies.get(family)
        if strategy is None:
            raise UnsupportedTypeException(type_metadata, f"No strategy registered for family '{family.value}'")

        return strategy
