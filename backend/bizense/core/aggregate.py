"""
Fold campaign records into dashboard views: platform breakdown, product
breakdown and global KPIs.

Records may be ORM rows, CampaignRecord dataclasses or plain dicts.
Totals do not depend on input order; only the sorted views are ordered,
and those keep input order on equal revenue.
"""
from collections.abc import Iterable
from dataclasses import dataclass, field

from bizense.core.numbers import parse_number
from bizense.models.reports import Platform

UNKNOWN_PLATFORM = "unknown"
NO_PLATFORM = "N/A"
KNOWN_PLATFORMS = {p.value for p in Platform}


def _get(record, name: str):
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def _num(record, name: str) -> float:
    return parse_number(_get(record, name))


def roas(revenue: float, spend: float) -> float:
    return revenue / spend if spend > 0 else 0.0


def money(value: float) -> str:
    return f"{value:.2f}"


def normalize_platform(value) -> str:
    name = (value or "").strip().lower() if isinstance(value, str) else ""
    return name if name in KNOWN_PLATFORMS else UNKNOWN_PLATFORM


@dataclass
class PlatformTotals:
    name: str = UNKNOWN_PLATFORM
    spend: float = 0.0
    revenue: float = 0.0
    conversions: float = 0.0

    @property
    def roas(self) -> float:
        return roas(self.revenue, self.spend)

    def as_dict(self) -> dict:
        return {"spend": self.spend, "revenue": self.revenue, "conversions": self.conversions}

    def ranked_dict(self) -> dict:
        return {"name": self.name, **self.as_dict(), "roas": self.roas}


@dataclass
class ProductTotals:
    name: str
    revenue: float = 0.0
    spend: float = 0.0
    conversions: float = 0.0
    platforms: dict[str, PlatformTotals] = field(default_factory=dict)

    @property
    def roas(self) -> float:
        return roas(self.revenue, self.spend)

    @property
    def best_platform(self) -> str:
        best, best_roas = NO_PLATFORM, 0.0
        for platform, totals in self.platforms.items():
            if totals.roas > best_roas:
                best, best_roas = platform, totals.roas
        return best

    def as_dict(self) -> dict:
        return {
            "name": self.name,
            "totalRevenue": self.revenue,
            "totalSpend": self.spend,
            "totalConversions": self.conversions,
            "totalROAS": self.roas,
            "platformRevenue": {p: t.revenue for p, t in self.platforms.items()},
            "bestPlatform": self.best_platform,
        }


@dataclass
class Kpis:
    total_spend: float = 0.0
    total_revenue: float = 0.0
    total_conversions: float = 0.0

    @property
    def roas(self) -> float:
        return roas(self.total_revenue, self.total_spend)

    def as_dict(self) -> dict:
        orders = self.total_conversions
        return {
            "totalSpend": money(self.total_spend),
            "totalRevenue": money(self.total_revenue),
            "roas": money(self.roas),
            "totalOrders": int(orders) if float(orders).is_integer() else orders,
        }


def platform_breakdown(records: Iterable) -> dict[str, PlatformTotals]:
    result: dict[str, PlatformTotals] = {}
    for record in records:
        name = normalize_platform(_get(record, "platform"))
        totals = result.setdefault(name, PlatformTotals(name=name))
        totals.spend += _num(record, "amount_spent")
        totals.revenue += _num(record, "revenue")
        totals.conversions += _num(record, "conversions")
    return result


def product_breakdown(records: Iterable) -> dict[str, ProductTotals]:
    result: dict[str, ProductTotals] = {}
    for record in records:
        name = (_get(record, "product_name") or "").strip()
        if not name:
            continue
        product = result.setdefault(name, ProductTotals(name=name))
        _accumulate(product, record)
    return result


def product_metrics(name: str, records: Iterable) -> ProductTotals:
    """Totals for one product over an already-selected set of records."""
    product = ProductTotals(name=name)
    for record in records:
        _accumulate(product, record)
    return product


def _accumulate(product: ProductTotals, record) -> None:
    spend = _num(record, "amount_spent")
    revenue = _num(record, "revenue")
    conversions = _num(record, "conversions")
    product.spend += spend
    product.revenue += revenue
    product.conversions += conversions
    name = normalize_platform(_get(record, "platform"))
    platform = product.platforms.setdefault(name, PlatformTotals(name=name))
    platform.spend += spend
    platform.revenue += revenue
    platform.conversions += conversions


def match_product(records: Iterable, product_name: str) -> list:
    """Records whose product name contains product_name, case-insensitively."""
    needle = product_name.strip().lower()
    if not needle:
        return []
    return [r for r in records if needle in (_get(r, "product_name") or "").lower()]


def compute_kpis(records: Iterable) -> Kpis:
    kpis = Kpis()
    for record in records:
        kpis.total_spend += _num(record, "amount_spent")
        kpis.total_revenue += _num(record, "revenue")
        kpis.total_conversions += _num(record, "conversions")
    return kpis


def sort_by_revenue(items: Iterable, key=lambda item: item.revenue) -> list:
    # sorted() is stable with reverse=True, so equal revenue keeps input order
    return sorted(items, key=key, reverse=True)


def platforms_by_revenue(records: Iterable) -> list[PlatformTotals]:
    """Platform totals, highest revenue first; ties keep first-seen order."""
    return sort_by_revenue(platform_breakdown(records).values())
