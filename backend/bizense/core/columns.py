"""
Canonical schema for ingested ad-platform rows and the header aliases each
export flavour uses for it. Header matching is exact and case-sensitive;
the first alias carrying a non-empty value wins.
"""
from collections.abc import Mapping, Sequence

RawRow = Mapping[str, str | None]

COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "campaign_name": ("Campaign name", "Campaign Name", "campaign_name", "Campaign"),
    "product_name": ("Product name", "Product Name", "product_name", "Product"),
    "amount_spent": (
        "Amount spent (CAD)",
        "Amount spent (USD)",
        "Amount Spent",
        "Amount spent",
        "Spend",
        "Cost",
        "amount_spent",
    ),
    "revenue": (
        "Purchases conversion value",
        "Revenue",
        "Purchase Value",
        "Conversion Value",
        "Conv. value",
        "Total conversion value",
        "revenue",
    ),
    "conversions": ("Purchases", "Conversions", "Orders", "Results", "conversions"),
    "clicks": ("Link clicks", "Clicks", "Link Clicks", "Clicks (all)", "clicks"),
    "impressions": ("Impressions", "Reach", "impressions"),
}


def get_column_value(row: RawRow, aliases: Sequence[str]) -> str:
    for name in aliases:
        value = row.get(name)
        if value is not None and value != "":
            return value
    return ""


def get_field(row: RawRow, field: str) -> str:
    """Look up a canonical field through its alias set."""
    return get_column_value(row, COLUMN_ALIASES[field])
