import base64
import binascii
import logging
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from interfaces.services.image_content_validator_interface import ImageContentValidatorInterface
from domain.entities.product import ImageContent


class ImageContentValidator(ImageContentValidatorInterface):
    """
    Pillow based validation of base64 image payloads for new gallery entries.

    Content is valid when its declared MIME type is an allowed one, its file
    name carries no path, the payload decodes from base64 and the decoded
    bytes open as an image of the declared format.
    """

    ALLOWED_MIME_TYPES = {
        "image/jpeg": "JPEG",
        "image/jpg": "JPEG",
        "image/png": "PNG",
        "image/gif": "GIF",
    }

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def is_valid(self, content: ImageContent) -> bool:
        if content is None:
            return False

        expected_format = self.ALLOWED_MIME_TYPES.get((content.type or "").lower())
        if expected_format is None:
            self.logger.warning(f"Image content type '{content.type}' is not allowed")
            return False

        if not content.name or "/" in content.name or "\\" in content.name:
            self.logger.warning(f"Image content name '{content.name}' is not a plain file name")
            return False

        try:
            raw = base64.b64decode(content.base64_encoded_data or "", validate=True)
        except (binascii.Error, ValueError):
            self.logger.warning(f"Image content '{content.name}' is not valid base64")
            return False

        if not raw:
            return False

        try:
            with Image.open(BytesIO(raw)) as image:
                image_format = image.format
                image.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            self.logger.warning(f"Image content '{content.name}' cannot be read: {str(e)}")
            return False

        if image_format != expected_format:
            self.logger.warning(
                f"Image content '{content.name}' declared as {content.type} but contains {image_format}"
            )
            return False

        return True
