from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from bizense.api.reports import UploadHistoryResponse, to_history_response
from bizense.core.aggregate import compute_kpis, platform_breakdown, platforms_by_revenue
from bizense.core.auth import get_current_user, get_store
from bizense.core.identity import AuthUser
from bizense.core.store import CampaignStore

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


class KpisSchema(BaseModel):
    totalSpend: str
    totalRevenue: str
    roas: str
    totalOrders: float | int


class PlatformTotalsSchema(BaseModel):
    spend: float
    revenue: float
    conversions: float


class PlatformRankSchema(PlatformTotalsSchema):
    name: str
    roas: float


class DashboardResponse(BaseModel):
    kpis: KpisSchema
    platformData: dict[str, PlatformTotalsSchema]
    # Same totals as platformData, highest revenue first
    platforms: list[PlatformRankSchema]
    recentUploads: list[UploadHistoryResponse]


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    request: Request,
    store: CampaignStore = Depends(get_store),
    current_user: AuthUser = Depends(get_current_user),
):
    campaigns = await store.list_campaign_reports(current_user.id)
    limit = request.app.state.context.settings.RECENT_UPLOADS_LIMIT
    recent = await store.recent_uploads(current_user.id, limit=limit)
    return DashboardResponse(
        kpis=KpisSchema(**compute_kpis(campaigns).as_dict()),
        platformData={p: PlatformTotalsSchema(**t.as_dict()) for p, t in platform_breakdown(campaigns).items()},
        platforms=[PlatformRankSchema(**t.ranked_dict()) for t in platforms_by_revenue(campaigns)],
        recentUploads=[to_history_response(u) for u in recent],
    )
