"""
Row transformer: one raw CSV row -> one canonical campaign record.
"""
import uuid
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field

from bizense.core.columns import RawRow, get_field
from bizense.core.numbers import parse_number

PRODUCT_DELIMITER = " - "


@dataclass
class CampaignRecord:
    user_id: uuid.UUID
    platform: str
    file_name: str
    campaign_name: str
    product_name: str
    amount_spent: float
    revenue: float
    conversions: float
    clicks: float
    impressions: float
    raw_data: dict = field(default_factory=dict)
    upload_id: uuid.UUID | None = None

    def to_row(self) -> dict:
        return asdict(self)


def derive_product_name(campaign_name: str) -> str:
    """Product is the campaign name up to the first " - " ("ProductX - Summer" -> "ProductX")."""
    return campaign_name.split(PRODUCT_DELIMITER, 1)[0].strip()


def transform_row(
    row: RawRow,
    user_id: uuid.UUID,
    platform: str,
    file_name: str,
    *,
    upload_id: uuid.UUID | None = None,
    revenue_per_conversion: Mapping[str, float] | None = None,
) -> CampaignRecord:
    campaign_name = get_field(row, "campaign_name").strip()
    product_name = get_field(row, "product_name").strip() or derive_product_name(campaign_name)

    conversions = parse_number(get_field(row, "conversions"))
    revenue_raw = get_field(row, "revenue")
    revenue = parse_number(revenue_raw)
    # Exports without a revenue column fall back to the product's configured value per conversion
    if not revenue_raw and revenue_per_conversion and product_name in revenue_per_conversion:
        revenue = conversions * parse_number(revenue_per_conversion[product_name])

    return CampaignRecord(
        user_id=user_id,
        platform=platform,
        file_name=file_name,
        campaign_name=campaign_name,
        product_name=product_name,
        amount_spent=parse_number(get_field(row, "amount_spent")),
        revenue=revenue,
        conversions=conversions,
        clicks=parse_number(get_field(row, "clicks")),
        impressions=parse_number(get_field(row, "impressions")),
        raw_data=dict(row),
        upload_id=upload_id,
    )
