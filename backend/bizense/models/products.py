import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from bizense.models.base import Base, TimestampMixin, utcnow


class ProductSetting(Base, TimestampMixin):
    __tablename__ = "products"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)
    product_name: Mapped[str] = mapped_column(String(512), nullable=False)
    revenue_per_conversion: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )

    __table_args__ = (UniqueConstraint("user_id", "product_name", name="uq_products_user_id_product_name"),)
