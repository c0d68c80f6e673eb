from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime
from enum import Enum


class QueueStatusEnum(str, Enum):
    """Enumeration of queue entry statuses."""
    PENDING = "pending"
    PROCESSING = "processing"
    DONE = "done"
    ERROR = "error"


class QueueEntryKindEnum(str, Enum):
    """Enumeration of queue entry kinds."""
    ASSET = "asset"
    PRODUCT = "product"


class QueueEntrySchema(BaseModel):
    """Schema for a single queue entry."""
    id: str = Field(..., description="Unique identifier of the entry")
    kind: QueueEntryKindEnum = Field(..., description="Asset or product entry")
    action: str = Field(..., description="insert/update or delete")
    status: QueueStatusEnum = Field(..., description="Current entry status")
    target_entity_id: str = Field(..., description="PIM identifier of the affected entity")
    store_view_id: int = Field(..., description="Store view the entry applies to")
    type_metadata: str = Field("", description="Encoded asset routing token")
    value: Optional[str] = Field(None, description="Handler payload, e.g. the video URL")
    asset_id: int = Field(0, description="Catalog identifier of the imported asset, 0 until imported")
    worker_id: Optional[str] = Field(None, description="Worker that claimed the entry")
    error_message: Optional[str] = Field(None, description="Last failure cause")
    created_at: Optional[datetime] = Field(None, description="Entry creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")
    started_at: Optional[datetime] = Field(None, description="Claim timestamp")
    finished_at: Optional[datetime] = Field(None, description="Terminal status timestamp")


class QueueEntryListResponse(BaseModel):
    """Response schema for queue entry listing."""
    success: bool = Field(True, description="Whether the request was successful")
    entries: List[QueueEntrySchema] = Field(..., description="Entries matching the filters")
    offset: int = Field(..., description="Number of skipped entries")
    limit: int = Field(..., description="Maximum number of returned entries")


class QueueEntryResponse(BaseModel):
    """Response schema for a single queue entry."""
    success: bool = Field(True, description="Whether the request was successful")
    entry: QueueEntrySchema = Field(..., description="Requested entry")


class QueueStatisticsResponse(BaseModel):
    """Response schema for queue statistics."""
    success: bool = Field(True, description="Whether the request was successful")
    counts: Dict[str, int] = Field(..., description="Number of entries per status")
    total: int = Field(..., description="Total number of entries")
    stale_processing: int = Field(..., description="Entries processing longer than the stale threshold")
    stale_threshold_minutes: int = Field(..., description="Threshold used for the stale count")


class HealthResponse(BaseModel):
    """Response schema for the service health check."""
    status: str = Field(..., description="healthy or degraded")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    database: bool = Field(..., description="Whether the queue store is reachable")
    timestamp: float = Field(..., description="Check timestamp")
