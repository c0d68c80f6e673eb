from typing import Optional, List, Dict
from datetime import datetime, timedelta
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func, and_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from interfaces.repositories.queue_entry_repository_interface import (
    QueueEntryRepositoryInterface,
    QueueEntryCriteria
)
from domain.entities.queue_entry import (
    QueueEntry,
    QueueEntryKind,
    QueueStatus,
    QueueAction,
    entry_class_for
)
from domain.exceptions import QueueException, DuplicateQueueEntryException
from infra.databases.models.queue_entry_model import QueueEntryModel


class QueueEntryRepository(QueueEntryRepositoryInterface):
    """
    SQLAlchemy implementation of QueueEntryRepositoryInterface.

    This repository persists asset and product queue entries in the
    ``sync_queue`` table. Uniqueness of active entries is enforced by the
    table's partial unique index, so an insert racing another sync pass
    surfaces as DuplicateQueueEntryException rather than a second row.

    Each public operation runs in its own session obtained from the factory
    and commits before returning.
    """

    def __init__(self, session_factory):
        """
        Initialize the queue entry repository with session factory.

        Args:
            session_factory: SQLAlchemy async_sessionmaker for creating database sessions
        """
        self.session_factory = session_factory

    async def _execute_with_session(self, operation):
        """
        Execute database operation with commit on success and rollback on failure.

        Args:
            operation: Async function that takes a session and performs database operations

        Returns:
            Result of the operation
        """
        async with self.session_factory() as session:
            try:
                result = await operation(session)
                await session.commit()
                return result
            except Exception:
                await session.rollback()
                raise

    async def _execute_read_only(self, operation):
        async with self.session_factory() as session:
            return await operation(session)

    def create(self, kind: QueueEntryKind = QueueEntryKind.ASSET) -> QueueEntry:
        """
        Build a new, unsaved queue entry.

        Args:
            kind: Entry variant to build

        Returns:
            QueueEntry: PENDING entry without identifier and with asset id 0
        """
        return entry_class_for(kind)(status=QueueStatus.PENDING, asset_id=0)

    async def save(self, entry: QueueEntry) -> QueueEntry:
        """
        Insert the entry on first save, update it afterwards.

        Args:
            entry: Queue entry to persist

        Returns:
            QueueEntry: Persisted entry with identifier and timestamps

        Raises:
            DuplicateQueueEntryException: If an equivalent entry is already pending or processing
            QueueException: If the store cannot persist the entry
        """
        now = datetime.utcnow()
        is_new = entry.id is None

        async def _save_operation(session: AsyncSession):
            if is_new:
                model = QueueEntryModel(
                    id=str(uuid.uuid4()),
                    entry_kind=entry.kind.value,
                    created_at=entry.created_at or now,
                )
                self._apply_entity_to_model(entry, model, now)
                session.add(model)
            else:
                model = await session.get(QueueEntryModel, entry.id)
                if model is None:
                    raise QueueException("save", f"Queue entry '{entry.id}' does not exist")
                self._apply_entity_to_model(entry, model, now)

            await session.flush()
            return self._model_to_entity(model)

        try:
            return await self._execute_with_session(_save_operation)
        except IntegrityError:
            raise DuplicateQueueEntryException(entry.target_entity_id, entry.type_metadata, entry.action.value)
        except SQLAlchemyError as e:
            raise QueueException("save", str(e))

    async def find(self, criteria: QueueEntryCriteria) -> List[QueueEntry]:
        """
        Find queue entries matching the given criteria, oldest first.

        Args:
            criteria: Filter to apply

        Returns:
            List[QueueEntry]: Matching entries
        """
        async def _find_operation(session: AsyncSession):
            conditions = []
            if criteria.kind is not None:
                conditions.append(QueueEntryModel.entry_kind == criteria.kind.value)
            if criteria.target_entity_id is not None:
                conditions.append(QueueEntryModel.target_entity_id == criteria.target_entity_id)
            if criteria.type_metadata is not None:
                conditions.append(QueueEntryModel.type_metadata == criteria.type_metadata)
            if criteria.action is not None:
                conditions.append(QueueEntryModel.action == criteria.action.value)
            if criteria.store_view_id is not None:
                conditions.append(QueueEntryModel.store_view_id == criteria.store_view_id)
            if criteria.statuses:
                conditions.append(QueueEntryModel.status.in_([status.value for status in criteria.statuses]))

            query = select(QueueEntryModel)
            if conditions:
                query = query.where(and_(*conditions))
            query = query.order_by(QueueEntryModel.created_at.asc()).offset(criteria.offset)
            if criteria.limit is not None:
                query = query.limit(criteria.limit)

            result = await session.execute(query)
            return [self._model_to_entity(model) for model in result.scalars().all()]

        try:
            return await self._execute_read_only(_find_operation)
        except SQLAlchemyError as e:
            raise QueueException("find", str(e))

    async def find_by_id(self, entry_id: str) -> Optional[QueueEntry]:
        async def _find_operation(session: AsyncSession):
            model = await session.get(QueueEntryModel, entry_id)
            return self._model_to_entity(model) if model else None

        try:
            return await self._execute_read_only(_find_operation)
        except SQLAlchemyError as e:
            raise QueueException("find_by_id", str(e))

    async def claim(self, entry_id: str, worker_id: str) -> bool:
        """
        Move a PENDING entry to PROCESSING with a compare-and-set update.

        Args:
            entry_id: Queue entry identifier
            worker_id: Worker identifier

        Returns:
            bool: True if the entry was claimed by this call
        """
        current_time = datetime.utcnow()

        async def _claim_operation(session: AsyncSession):
            query = (
                update(QueueEntryModel)
                .where(
                    and_(
                        QueueEntryModel.id == entry_id,
                        QueueEntryModel.status == QueueStatus.PENDING.value
                    )
                )
                .values(
                    status=QueueStatus.PROCESSING.value,
                    worker_id=worker_id,
                    started_at=current_time,
                    updated_at=current_time
                )
            )
            result = await session.execute(query)
            return result.rowcount > 0

        try:
            return await self._execute_with_session(_claim_operation)
        except SQLAlchemyError as e:
            raise QueueException("claim", str(e))

    async def find_stale_processing_entries(self, timeout_minutes: int = 60) -> List[QueueEntry]:
        """
        Find entries that have been processing for longer than the timeout period.

        Args:
            timeout_minutes: Maximum processing time before considering an entry stale

        Returns:
            List[QueueEntry]: Entries that may be stuck in processing
        """
        timeout_threshold = datetime.utcnow() - timedelta(minutes=timeout_minutes)

        async def _find_operation(session: AsyncSession):
            query = (
                select(QueueEntryModel)
                .where(
                    and_(
                        QueueEntryModel.status == QueueStatus.PROCESSING.value,
                        QueueEntryModel.started_at < timeout_threshold
                    )
                )
                .order_by(QueueEntryModel.started_at.asc())
            )
            result = await session.execute(query)
            return [self._model_to_entity(model) for model in result.scalars().all()]

        try:
            return await self._execute_read_only(_find_operation)
        except SQLAlchemyError as e:
            raise QueueException("find_stale_processing_entries", str(e))

    async def count_by_status(self) -> Dict[QueueStatus, int]:
        async def _count_operation(session: AsyncSession):
            query = select(QueueEntryModel.status, func.count(QueueEntryModel.id)).group_by(QueueEntryModel.status)
            result = await session.execute(query)
            counts = {status: 0 for status in QueueStatus}
            for status_value, count in result.all():
                counts[QueueStatus(status_value)] = count
            return counts

        try:
            return await self._execute_read_only(_count_operation)
        except SQLAlchemyError as e:
            raise QueueException("count_by_status", str(e))

    def _apply_entity_to_model(self, entry: QueueEntry, model: QueueEntryModel, now: datetime) -> None:
        model.action = entry.action.value
        model.status = entry.status.value
        model.target_entity_id = entry.target_entity_id
        model.store_view_id = entry.store_view_id
        model.type_metadata = entry.type_metadata or ""
        model.value = entry.value
        model.asset_id = entry.asset_id or 0
        model.worker_id = entry.worker_id
        model.error_message = entry.error_message
        model.started_at = entry.started_at
        model.finished_at = entry.finished_at
        model.updated_at = now

    def _model_to_entity(self, model: QueueEntryModel) -> QueueEntry:
        """
        Convert SQLAlchemy model to domain entity.

        Args:
            model: QueueEntryModel instance from database

        Returns:
            QueueEntry: AssetQueueEntry or ProductQueueEntry depending on the row kind
        """
        entry_class = entry_class_for(QueueEntryKind(model.entry_kind))
        return entry_class(
            id=str(model.id),
            action=QueueAction(model.action),
            status=QueueStatus(model.status),
            target_entity_id=model.target_entity_id,
            store_view_id=model.store_view_id,
            type_metadata=model.type_metadata or "",
            value=model.value,
            asset_id=model.asset_id or 0,
            worker_id=model.worker_id,
            error_message=model.error_message,
            created_at=model.created_at,
            updated_at=model.updated_at,
            started_at=model.started_at,
            finished_at=model.finished_at
        )
