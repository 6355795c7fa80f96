from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from pydantic import BaseModel

from bizense.core.auth import get_current_user, get_store
from bizense.core.errors import IngestionError, InvalidFileError, err
from bizense.core.identity import AuthUser
from bizense.core.ingest import Ingestion, normalize_platform_input
from bizense.core.staging import stage_upload
from bizense.core.store import CampaignStore
from bizense.models import CampaignReport

router = APIRouter(prefix="/upload", tags=["upload"])


class CampaignReportResponse(BaseModel):
    id: UUID
    platform: str
    file_name: str
    campaign_name: str
    product_name: str
    amount_spent: float
    revenue: float
    conversions: float
    clicks: float
    impressions: float


class UploadResponse(BaseModel):
    message: str
    rowsProcessed: int
    uploadId: UUID
    historyRecorded: bool
    data: list[CampaignReportResponse]


def _to_response(report: CampaignReport) -> CampaignReportResponse:
    return CampaignReportResponse(
        id=report.id,
        platform=report.platform,
        file_name=report.file_name,
        campaign_name=report.campaign_name,
        product_name=report.product_name,
        amount_spent=report.amount_spent,
        revenue=report.revenue,
        conversions=report.conversions,
        clicks=report.clicks,
        impressions=report.impressions,
    )


@router.post("", response_model=UploadResponse)
async def upload_csv(
    request: Request,
    file: UploadFile | None = File(None),
    platform: str | None = Form(None),
    store: CampaignStore = Depends(get_store),
    current_user: AuthUser = Depends(get_current_user),
):
    """Ingest one ad-platform CSV export (facebook, tiktok or google)."""
    context = request.app.state.context
    if file is None or not file.filename:
        raise err("missing_file", "No file uploaded")
    # Reject a bad platform before anything touches the disk
    try:
        platform = normalize_platform_input(platform)
    except IngestionError as e:
        raise err(e.code, e.message) from e

    try:
        staged = await stage_upload(file, context.staging_dir, context.settings.MAX_UPLOAD_BYTES)
    except InvalidFileError as e:
        raise err(e.code, e.message) from e

    ingestion = Ingestion(store, max_rows=context.settings.MAX_ROWS)
    try:
        result = await ingestion.run(staged, platform, current_user.id)
    except IngestionError as e:
        raise err(e.code, e.message) from e

    return UploadResponse(
        message="File uploaded successfully",
        rowsProcessed=result.rows_processed,
        uploadId=result.upload_id,
        historyRecorded=result.history_recorded,
        data=[_to_response(r) for r in result.inserted],
    )
