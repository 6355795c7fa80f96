from bizense.models.base import Base, TimestampMixin
from bizense.models.products import ProductSetting
from bizense.models.reports import CampaignReport, Platform, UploadHistory, UploadStatus

__all__ = [
    "Base",
    "TimestampMixin",
    "CampaignReport",
    "Platform",
    "ProductSetting",
    "UploadHistory",
    "UploadStatus",
]
