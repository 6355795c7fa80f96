"""Tests for the data-store gateway against a throwaway SQLite database."""

import uuid
from datetime import date, datetime, timedelta, timezone

import pytest

from bizense.core.errors import StoreError
from bizense.core.store import HistoryFilters
from bizense.core.transform import transform_row
from bizense.models import UploadHistory, UploadStatus


def record(user_id, campaign="Mug - Spring", spend="10", platform="facebook", upload_id=None):
    row = {"Campaign name": campaign, "Amount spent (CAD)": spend, "Purchases": "1"}
    return transform_row(row, user_id, platform, "export.csv", upload_id=upload_id)


class TestCampaignReports:
    async def test_insert_and_list_scoped_to_owner(self, store, user_id):
        other = uuid.uuid4()
        inserted = await store.insert_campaign_reports([record(user_id), record(user_id, "Lamp - X"), record(other)])
        assert len(inserted) == 3
        assert all(r.id is not None for r in inserted)

        mine = await store.list_campaign_reports(user_id)
        assert sorted(r.product_name for r in mine) == ["Lamp", "Mug"]
        assert mine[0].raw_data["Amount spent (CAD)"] == "10"

    async def test_filter_by_platform(self, store, user_id):
        await store.insert_campaign_reports([record(user_id), record(user_id, platform="google")])
        rows = await store.list_campaign_reports(user_id, platform="google")
        assert [r.platform for r in rows] == ["google"]

    async def test_delete_for_upload(self, store, user_id):
        upload_id = uuid.uuid4()
        await store.insert_campaign_reports([record(user_id, upload_id=upload_id), record(user_id)])
        assert await store.delete_campaign_reports_for_upload(user_id, upload_id) == 1
        assert len(await store.list_campaign_reports(user_id)) == 1

    async def test_store_fault_wrapped(self, store, user_id, context):
        async with context.engine.begin() as conn:
            await conn.exec_driver_sql("DROP TABLE campaign_reports")
        with pytest.raises(StoreError) as exc:
            await store.insert_campaign_reports([record(user_id)])
        assert "campaign_reports" in exc.value.message
        assert exc.value.operation == "insert_campaign_reports"


class TestUploadHistory:
    async def test_insert_with_given_id(self, store, user_id):
        upload_id = uuid.uuid4()
        entry = await store.insert_upload_history(user_id, "a.csv", "facebook", 4, upload_id=upload_id)
        assert entry.id == upload_id
        assert entry.status == UploadStatus.COMPLETED.value
        assert entry.upload_date is not None

    async def test_recent_uploads_newest_first(self, store, user_id):
        for name in ("first.csv", "second.csv", "third.csv"):
            await store.insert_upload_history(user_id, name, "tiktok", 1)
        recent = await store.recent_uploads(user_id, limit=2)
        assert [u.file_name for u in recent] == ["third.csv", "second.csv"]

    async def test_page_filters(self, store, user_id):
        await store.insert_upload_history(user_id, "FB_March.csv", "facebook", 3)
        await store.insert_upload_history(user_id, "google_march.csv", "google", 5)
        await store.insert_upload_history(user_id, "fb_april.csv", "facebook", 7)
        await store.insert_upload_history(uuid.uuid4(), "fb_other_user.csv", "facebook", 9)

        items, total = await store.page_upload_history(user_id, HistoryFilters(platform="facebook"))
        assert total == 2
        assert {i.file_name for i in items} == {"FB_March.csv", "fb_april.csv"}

        items, total = await store.page_upload_history(user_id, HistoryFilters(search="march"))
        assert total == 2

        items, total = await store.page_upload_history(user_id, HistoryFilters(platform="all"), page=2, limit=2)
        assert total == 3
        assert len(items) == 1
        assert items[0].file_name == "FB_March.csv"

    async def test_date_range(self, store, user_id, context):
        async with context.session_factory() as session:
            session.add_all(
                [
                    UploadHistory(
                        user_id=user_id,
                        file_name="old.csv",
                        platform="google",
                        rows_processed=1,
                        upload_date=datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc),
                    ),
                    UploadHistory(
                        user_id=user_id,
                        file_name="new.csv",
                        platform="google",
                        rows_processed=1,
                        upload_date=datetime(2024, 3, 5, 23, 30, tzinfo=timezone.utc),
                    ),
                ]
            )
            await session.commit()

        items, total = await store.page_upload_history(
            user_id, HistoryFilters(start_date=date(2024, 3, 1), end_date=date(2024, 3, 5))
        )
        assert total == 1
        assert items[0].file_name == "new.csv"

    async def test_stats(self, store, user_id, context):
        now = datetime.now(timezone.utc)
        await store.insert_upload_history(user_id, "a.csv", "facebook", 3)
        await store.insert_upload_history(user_id, "b.csv", "facebook", 0, status=UploadStatus.FAILED)
        async with context.session_factory() as session:
            session.add(
                UploadHistory(
                    user_id=user_id,
                    file_name="last_year.csv",
                    platform="google",
                    rows_processed=10,
                    upload_date=now - timedelta(days=400),
                )
            )
            await session.commit()

        stats = await store.upload_history_stats(user_id, now=now)
        assert stats == {
            "totalUploads": 3,
            "successfulUploads": 2,
            "totalRowsProcessed": 13,
            "uploadsThisMonth": 2,
        }

    async def test_delete_scoped_to_owner(self, store, user_id):
        entry = await store.insert_upload_history(user_id, "a.csv", "facebook", 1)
        assert await store.delete_upload_history(uuid.uuid4(), entry.id) == (None, 0)
        deleted, purged = await store.delete_upload_history(user_id, entry.id)
        assert deleted is not None
        assert purged == 0
        assert await store.delete_upload_history(user_id, entry.id) == (None, 0)

    async def test_delete_with_purge(self, store, user_id):
        upload_id = uuid.uuid4()
        await store.insert_campaign_reports([record(user_id, upload_id=upload_id), record(user_id)])
        await store.insert_upload_history(user_id, "a.csv", "facebook", 1, upload_id=upload_id)
        entry, purged = await store.delete_upload_history(user_id, upload_id, purge_records=True)
        assert entry.id == upload_id
        assert purged == 1
        assert len(await store.list_campaign_reports(user_id)) == 1

    async def test_failed_purge_keeps_history_entry(self, store, user_id, context):
        entry = await store.insert_upload_history(user_id, "a.csv", "facebook", 1)
        async with context.engine.begin() as conn:
            await conn.exec_driver_sql("DROP TABLE campaign_reports")
        with pytest.raises(StoreError):
            await store.delete_upload_history(user_id, entry.id, purge_records=True)
        _, total = await store.page_upload_history(user_id, HistoryFilters())
        assert total == 1

    async def test_inserted_rows_survive_later_rollback(self, store, user_id, context):
        inserted = await store.insert_campaign_reports([record(user_id, spend="12.50")])
        async with context.engine.begin() as conn:
            await conn.exec_driver_sql("DROP TABLE upload_history")
        with pytest.raises(StoreError):
            await store.insert_upload_history(user_id, "a.csv", "facebook", 1)
        assert inserted[0].id is not None
        assert inserted[0].amount_spent == 12.5
        assert inserted[0].product_name == "Mug"


class TestProducts:
    async def test_upsert_is_keyed_on_name(self, store, user_id):
        first = await store.upsert_product(user_id, "Mug", 10.0)
        second = await store.upsert_product(user_id, "Mug", 12.5)
        assert first.id == second.id
        products = await store.list_products(user_id)
        assert len(products) == 1
        assert products[0].revenue_per_conversion == 12.5

    async def test_same_name_other_owner(self, store, user_id):
        await store.upsert_product(user_id, "Mug", 10.0)
        await store.upsert_product(uuid.uuid4(), "Mug", 3.0)
        assert await store.product_settings_map(user_id) == {"Mug": 10.0}

    async def test_update_and_delete(self, store, user_id):
        product = await store.upsert_product(user_id, "Lamp", 1.0)
        updated = await store.update_product(user_id, product.id, revenue_per_conversion=4.0)
        assert updated.revenue_per_conversion == 4.0
        assert updated.product_name == "Lamp"
        assert await store.update_product(uuid.uuid4(), product.id, product_name="X") is None
        assert await store.delete_product(uuid.uuid4(), product.id) is False
        assert await store.delete_product(user_id, product.id) is True
        assert await store.list_products(user_id) == []
