from abc import ABC, abstractmethod
from domain.entities.product import ImageContent


class ImageContentValidatorInterface(ABC):
    """Service interface validating image payloads before they reach the catalog."""

    @abstractmethod
    def is_valid(self, content: ImageContent) -> bool:
        """
        Check that an image payload can be stored by the catalog.

        Args:
            content: Base64 encoded image with name and MIME type

        Returns:
            bool: True if the payload is a well formed image of the declared type
        """
        pass
