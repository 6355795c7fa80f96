"""
Upload history: paginated listing with summary stats, and deletion.
"""
import math
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from bizense.core.auth import get_current_user, get_store
from bizense.core.errors import err
from bizense.core.identity import AuthUser
from bizense.core.store import CampaignStore, HistoryFilters
from bizense.models import UploadHistory

router = APIRouter(prefix="/reports", tags=["reports"])


class UploadHistoryResponse(BaseModel):
    id: UUID
    file_name: str
    platform: str
    rows_processed: int
    status: str
    upload_date: str


class PaginationSchema(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class StatsSchema(BaseModel):
    totalUploads: int
    successfulUploads: int
    totalRowsProcessed: int
    uploadsThisMonth: int


class ReportsResponse(BaseModel):
    uploads: list[UploadHistoryResponse]
    pagination: PaginationSchema
    stats: StatsSchema


def to_history_response(entry: UploadHistory) -> UploadHistoryResponse:
    return UploadHistoryResponse(
        id=entry.id,
        file_name=entry.file_name,
        platform=entry.platform,
        rows_processed=entry.rows_processed,
        status=entry.status,
        upload_date=entry.upload_date.isoformat() if entry.upload_date else "",
    )


@router.get("", response_model=ReportsResponse)
async def list_reports(
    platform: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    start_date: date | None = None,
    end_date: date | None = None,
    search: str | None = None,
    store: CampaignStore = Depends(get_store),
    current_user: AuthUser = Depends(get_current_user),
):
    """Caller's upload history, newest first, with totals across all their uploads."""
    filters = HistoryFilters(
        platform=platform.lower() if platform else None,
        start_date=start_date,
        end_date=end_date,
        search=search.strip() if search and search.strip() else None,
    )
    uploads, total = await store.page_upload_history(current_user.id, filters, page=page, limit=limit)
    stats = await store.upload_history_stats(current_user.id)
    return ReportsResponse(
        uploads=[to_history_response(u) for u in uploads],
        pagination=PaginationSchema(
            page=page,
            limit=limit,
            total=total,
            totalPages=math.ceil(total / limit),
        ),
        stats=StatsSchema(**stats),
    )


@router.delete("/{report_id}")
async def delete_report(
    report_id: UUID,
    purge_records: bool = False,
    store: CampaignStore = Depends(get_store),
    current_user: AuthUser = Depends(get_current_user),
):
    """Delete one history entry. Campaign records stay unless purge_records is set."""
    entry, purged = await store.delete_upload_history(current_user.id, report_id, purge_records=purge_records)
    if entry is None:
        raise err("not_found", "Upload record not found", status_code=404)
    return {"message": "Upload record deleted successfully", "recordsDeleted": purged}
