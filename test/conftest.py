import pytest
from unittest.mock import Mock, AsyncMock
from io import BytesIO
import base64

from PIL import Image

from config.database import DatabaseConfig
from infra.databases.database_connection import DatabaseConnection
from infra.repositories.queue_entry_repository import QueueEntryRepository
from domain.entities.queue_entry import AssetQueueEntry, QueueAction, QueueStatus
from domain.entities.product import Product, MediaGalleryEntry, VideoContent, PimProduct
from domain.value_objects import EXTERNAL_VIDEO_MEDIA_TYPE


@pytest.fixture
async def sqlite_database(tmp_path):
    """File backed SQLite queue store with the schema created."""
    database = DatabaseConnection(DatabaseConfig.get_sqlite_url(db_path=str(tmp_path / "queue.db")))
    database.initialize()
    await database.create_schema()
    yield database
    await database.close()


@pytest.fixture
def queue_repository(sqlite_database):
    """Real queue repository bound to the temporary SQLite store."""
    return QueueEntryRepository(sqlite_database.session_factory)


@pytest.fixture
def jpeg_bytes():
    """Small JPEG image generated with Pillow."""
    buffer = BytesIO()
    Image.new("RGB", (8, 8), color=(200, 30, 30)).save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def jpeg_base64(jpeg_bytes):
    return base64.b64encode(jpeg_bytes).decode("ascii")


@pytest.fixture
def youtube_asset_entry():
    """Pending YouTube asset entry as enqueued by the video modifier."""
    return AssetQueueEntry(
        id="entry-123",
        action=QueueAction.INSERT_UPDATE,
        status=QueueStatus.PENDING,
        target_entity_id="pim-42",
        store_view_id=1,
        type_metadata="catalog_product/video_youtube",
        value="https://youtube.com/watch?v=abc123",
        asset_id=0
    )


@pytest.fixture
def product_with_video():
    """Catalog product holding one image and one external video entry."""
    return Product(
        sku="SKU-42",
        id=42,
        store_id=1,
        pim_id="pim-42",
        media_gallery_entries=[
            MediaGalleryEntry(id=1, media_type="image", label="Front"),
            MediaGalleryEntry(
                id=2,
                media_type=EXTERNAL_VIDEO_MEDIA_TYPE,
                label="Old video",
                video_content=VideoContent(
                    video_provider="youtube",
                    video_url="https://youtube.com/watch?v=abc123"
                )
            )
        ]
    )


@pytest.fixture
def pim_product_with_video():
    return PimProduct(data={
        "pimcore_id": "pim-42",
        "category_ids": [5, 9],
        "video": {"format": "youtube", "link": "abc123"}
    })


@pytest.fixture
def mock_queue_repository():
    """Mock queue repository with async operations."""
    repository = Mock()
    repository.create = Mock(side_effect=lambda kind=None: AssetQueueEntry())
    repository.save = AsyncMock(side_effect=lambda entry: entry)
    repository.find = AsyncMock(return_value=[])
    repository.find_by_id = AsyncMock(return_value=None)
    repository.claim = AsyncMock(return_value=True)
    repository.find_stale_processing_entries = AsyncMock(return_value=[])
    repository.count_by_status = AsyncMock(return_value={})
    return repository
