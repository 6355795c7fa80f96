"""
Per-owner product settings (revenue per conversion) and product performance.
Metrics are recomputed from campaign records on every read.
"""
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from bizense.core.aggregate import (
    match_product,
    money,
    product_breakdown,
    product_metrics,
    sort_by_revenue,
)
from bizense.core.auth import get_current_user, get_store
from bizense.core.errors import err
from bizense.core.identity import AuthUser
from bizense.core.store import CampaignStore
from bizense.models import ProductSetting

router = APIRouter(prefix="/products", tags=["products"])


class ProductRequest(BaseModel):
    product_name: str = ""
    revenue_per_conversion: float = Field(0.0, ge=0)


class ProductUpdateRequest(BaseModel):
    product_name: str | None = None
    revenue_per_conversion: float | None = Field(None, ge=0)


class ProductResponse(BaseModel):
    id: UUID
    product_name: str
    revenue_per_conversion: float
    created_at: str
    updated_at: str | None


class ProductWithMetricsResponse(ProductResponse):
    totalSpend: str
    totalRevenue: str
    totalConversions: float
    bestPlatform: str
    roas: str


class ProductPerformanceRow(BaseModel):
    name: str
    totalRevenue: float
    totalSpend: float
    totalConversions: float
    totalROAS: float
    platformRevenue: dict[str, float]
    bestPlatform: str


def _to_response(product: ProductSetting) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        product_name=product.product_name,
        revenue_per_conversion=product.revenue_per_conversion,
        created_at=product.created_at.isoformat(),
        updated_at=product.updated_at.isoformat() if product.updated_at else None,
    )


@router.get("", response_model=list[ProductWithMetricsResponse])
async def list_products(
    store: CampaignStore = Depends(get_store),
    current_user: AuthUser = Depends(get_current_user),
):
    products = await store.list_products(current_user.id)
    campaigns = await store.list_campaign_reports(current_user.id)
    items = []
    for product in products:
        metrics = product_metrics(product.product_name, match_product(campaigns, product.product_name))
        items.append(
            ProductWithMetricsResponse(
                **_to_response(product).model_dump(),
                totalSpend=money(metrics.spend),
                totalRevenue=money(metrics.revenue),
                totalConversions=metrics.conversions,
                bestPlatform=metrics.best_platform,
                roas=money(metrics.roas),
            )
        )
    return items


@router.get("/performance", response_model=list[ProductPerformanceRow])
async def product_performance(
    store: CampaignStore = Depends(get_store),
    current_user: AuthUser = Depends(get_current_user),
):
    """Campaign records grouped by product, highest revenue first."""
    campaigns = await store.list_campaign_reports(current_user.id)
    products = sort_by_revenue(product_breakdown(campaigns).values())
    return [ProductPerformanceRow(**p.as_dict()) for p in products]


@router.post("", response_model=ProductResponse)
async def upsert_product(
    body: ProductRequest,
    store: CampaignStore = Depends(get_store),
    current_user: AuthUser = Depends(get_current_user),
):
    """Create the setting for product_name, or update it if the caller already has one."""
    name = body.product_name.strip()
    if not name:
        raise err("validation_error", "Product name is required")
    product = await store.upsert_product(current_user.id, name, body.revenue_per_conversion)
    return _to_response(product)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: UUID,
    body: ProductUpdateRequest,
    store: CampaignStore = Depends(get_store),
    current_user: AuthUser = Depends(get_current_user),
):
    name = body.product_name.strip() if body.product_name is not None else None
    if name == "":
        raise err("validation_error", "Product name cannot be empty")
    product = await store.update_product(
        current_user.id,
        product_id,
        product_name=name,
        revenue_per_conversion=body.revenue_per_conversion,
    )
    if product is None:
        raise err("not_found", "Product not found", status_code=404)
    return _to_response(product)


@router.delete("/{product_id}")
async def delete_product(
    product_id: UUID,
    store: CampaignStore = Depends(get_store),
    current_user: AuthUser = Depends(get_current_user),
):
    deleted = await store.delete_product(current_user.id, product_id)
    if not deleted:
        raise err("not_found", "Product not found", status_code=404)
    return {"message": "Product deleted successfully"}
