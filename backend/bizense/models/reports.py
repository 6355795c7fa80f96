import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, Index, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from bizense.models.base import Base, JSONType, TimestampMixin, utcnow


class Platform(str, enum.Enum):
    FACEBOOK = "facebook"
    TIKTOK = "tiktok"
    GOOGLE = "google"


class UploadStatus(str, enum.Enum):
    COMPLETED = "completed"
    FAILED = "failed"


class CampaignReport(Base, TimestampMixin):
    __tablename__ = "campaign_reports"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    upload_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    file_name: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    platform: Mapped[str] = mapped_column(String(32), nullable=False)
    campaign_name: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    product_name: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    amount_spent: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    revenue: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    conversions: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    clicks: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    impressions: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    raw_data: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    __table_args__ = (
        Index("ix_campaign_reports_user_id_platform", "user_id", "platform"),
        Index("ix_campaign_reports_upload_id", "upload_id"),
    )


class UploadHistory(Base):
    __tablename__ = "upload_history"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    file_name: Mapped[str] = mapped_column(String(512), nullable=False)
    platform: Mapped[str] = mapped_column(String(32), nullable=False)
    rows_processed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=UploadStatus.COMPLETED.value,
    )
    upload_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (Index("ix_upload_history_user_id_upload_date", "user_id", "upload_date"),)
