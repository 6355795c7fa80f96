"""
Data-store gateway: typed table operations over the managed Postgres.

Every public method is one unit of work. It commits on success; on failure
it rolls back and raises StoreError with the driver's message, which the
HTTP layer passes through unchanged.
"""
import logging
import uuid
from collections.abc import Iterable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bizense.core.errors import StoreError
from bizense.core.transform import CampaignRecord
from bizense.models import CampaignReport, ProductSetting, UploadHistory, UploadStatus

logger = logging.getLogger(__name__)


@dataclass
class HistoryFilters:
    platform: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    search: str | None = None


def _error_message(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


def _day_start(d: date) -> datetime:
    return datetime.combine(d, time.min, tzinfo=timezone.utc)


class CampaignStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    @asynccontextmanager
    async def _unit_of_work(self, operation: str):
        try:
            yield self.session
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Store operation %s failed: %s", operation, _error_message(e))
            raise StoreError(_error_message(e), operation=operation) from e

    # --- campaign_reports ---

    async def insert_campaign_reports(self, records: Iterable[CampaignRecord]) -> list[CampaignReport]:
        rows = [CampaignReport(**record.to_row()) for record in records]
        async with self._unit_of_work("insert_campaign_reports") as session:
            session.add_all(rows)
            await session.flush()
        # Detach: a later rollback on this session would expire them mid-response
        for row in rows:
            self.session.expunge(row)
        return rows

    async def list_campaign_reports(self, user_id: uuid.UUID, platform: str | None = None) -> list[CampaignReport]:
        async with self._unit_of_work("list_campaign_reports") as session:
            q = select(CampaignReport).where(CampaignReport.user_id == user_id)
            if platform:
                q = q.where(CampaignReport.platform == platform)
            result = await session.execute(q.order_by(CampaignReport.created_at))
            return list(result.scalars().all())

    async def delete_campaign_reports_for_upload(self, user_id: uuid.UUID, upload_id: uuid.UUID) -> int:
        async with self._unit_of_work("delete_campaign_reports") as session:
            return await self._delete_reports(session, user_id, upload_id)

    @staticmethod
    async def _delete_reports(session: AsyncSession, user_id: uuid.UUID, upload_id: uuid.UUID) -> int:
        result = await session.execute(
            delete(CampaignReport).where(
                CampaignReport.user_id == user_id,
                CampaignReport.upload_id == upload_id,
            )
        )
        return result.rowcount or 0

    # --- upload_history ---

    async def insert_upload_history(
        self,
        user_id: uuid.UUID,
        file_name: str,
        platform: str,
        rows_processed: int,
        status: UploadStatus = UploadStatus.COMPLETED,
        upload_id: uuid.UUID | None = None,
    ) -> UploadHistory:
        entry = UploadHistory(
            id=upload_id or uuid.uuid4(),
            user_id=user_id,
            file_name=file_name,
            platform=platform,
            rows_processed=rows_processed,
            status=status.value,
        )
        async with self._unit_of_work("insert_upload_history") as session:
            session.add(entry)
            await session.flush()
        return entry

    async def recent_uploads(self, user_id: uuid.UUID, limit: int = 5) -> list[UploadHistory]:
        async with self._unit_of_work("recent_uploads") as session:
            result = await session.execute(
                select(UploadHistory)
                .where(UploadHistory.user_id == user_id)
                .order_by(UploadHistory.upload_date.desc())
                .limit(limit)
            )
            return list(result.scalars().all())

    async def page_upload_history(
        self,
        user_id: uuid.UUID,
        filters: HistoryFilters,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[UploadHistory], int]:
        conditions = [UploadHistory.user_id == user_id]
        if filters.platform and filters.platform != "all":
            conditions.append(UploadHistory.platform == filters.platform)
        if filters.start_date:
            conditions.append(UploadHistory.upload_date >= _day_start(filters.start_date))
        if filters.end_date:
            # whole end day is included
            conditions.append(UploadHistory.upload_date < _day_start(filters.end_date + timedelta(days=1)))
        if filters.search:
            conditions.append(UploadHistory.file_name.ilike(f"%{filters.search}%"))

        offset = (page - 1) * limit
        async with self._unit_of_work("page_upload_history") as session:
            total = (
                await session.execute(select(func.count()).select_from(UploadHistory).where(*conditions))
            ).scalar() or 0
            result = await session.execute(
                select(UploadHistory)
                .where(*conditions)
                .order_by(UploadHistory.upload_date.desc())
                .offset(offset)
                .limit(limit)
            )
            return list(result.scalars().all()), total

    async def upload_history_stats(self, user_id: uuid.UUID, now: datetime | None = None) -> dict:
        now = now or datetime.now(timezone.utc)
        async with self._unit_of_work("upload_history_stats") as session:
            result = await session.execute(
                select(UploadHistory.status, UploadHistory.rows_processed, UploadHistory.upload_date).where(
                    UploadHistory.user_id == user_id
                )
            )
            rows = result.all()
        return {
            "totalUploads": len(rows),
            "successfulUploads": sum(1 for r in rows if r.status == UploadStatus.COMPLETED.value),
            "totalRowsProcessed": sum(r.rows_processed or 0 for r in rows),
            "uploadsThisMonth": sum(
                1
                for r in rows
                if r.upload_date is not None
                and r.upload_date.year == now.year
                and r.upload_date.month == now.month
            ),
        }

    async def delete_upload_history(
        self,
        user_id: uuid.UUID,
        upload_id: uuid.UUID,
        purge_records: bool = False,
    ) -> tuple[UploadHistory | None, int]:
        """
        Delete one history entry, and with purge_records its campaign records,
        in a single transaction. Returns (entry or None, records deleted).
        """
        async with self._unit_of_work("delete_upload_history") as session:
            result = await session.execute(
                select(UploadHistory).where(
                    UploadHistory.id == upload_id,
                    UploadHistory.user_id == user_id,
                )
            )
            entry = result.scalar_one_or_none()
            if entry is None:
                return None, 0
            purged = await self._delete_reports(session, user_id, upload_id) if purge_records else 0
            await session.delete(entry)
            return entry, purged

    # --- products ---

    async def list_products(self, user_id: uuid.UUID) -> list[ProductSetting]:
        async with self._unit_of_work("list_products") as session:
            result = await session.execute(
                select(ProductSetting)
                .where(ProductSetting.user_id == user_id)
                .order_by(ProductSetting.created_at.desc())
            )
            return list(result.scalars().all())

    async def product_settings_map(self, user_id: uuid.UUID) -> dict[str, float]:
        """product_name -> revenue_per_conversion for the owner."""
        return {p.product_name: p.revenue_per_conversion for p in await self.list_products(user_id)}

    async def upsert_product(
        self,
        user_id: uuid.UUID,
        product_name: str,
        revenue_per_conversion: float,
    ) -> ProductSetting:
        """Insert or update the owner's setting for product_name (natural key)."""
        async with self._unit_of_work("upsert_product") as session:
            result = await session.execute(
                select(ProductSetting).where(
                    ProductSetting.user_id == user_id,
                    ProductSetting.product_name == product_name,
                )
            )
            product = result.scalar_one_or_none()
            if product is None:
                product = ProductSetting(
                    user_id=user_id,
                    product_name=product_name,
                    revenue_per_conversion=revenue_per_conversion,
                )
                session.add(product)
            else:
                product.revenue_per_conversion = revenue_per_conversion
                product.updated_at = datetime.now(timezone.utc)
            await session.flush()
        return product

    async def update_product(
        self,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
        product_name: str | None = None,
        revenue_per_conversion: float | None = None,
    ) -> ProductSetting | None:
        async with self._unit_of_work("update_product") as session:
            result = await session.execute(
                select(ProductSetting).where(
                    ProductSetting.id == product_id,
                    ProductSetting.user_id == user_id,
                )
            )
            product = result.scalar_one_or_none()
            if product is None:
                return None
            if product_name is not None:
                product.product_name = product_name
            if revenue_per_conversion is not None:
                product.revenue_per_conversion = revenue_per_conversion
            product.updated_at = datetime.now(timezone.utc)
            await session.flush()
        return product

    async def delete_product(self, user_id: uuid.UUID, product_id: uuid.UUID) -> bool:
        async with self._unit_of_work("delete_product") as session:
            result = await session.execute(
                delete(ProductSetting).where(
                    ProductSetting.id == product_id,
                    ProductSetting.user_id == user_id,
                )
            )
            return (result.rowcount or 0) > 0
