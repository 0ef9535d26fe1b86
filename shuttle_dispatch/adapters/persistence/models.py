"""SQLAlchemy ORM models — maps to PostgreSQL tables."""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from shuttle_dispatch.adapters.persistence.database import Base


class SavedViewModel(Base):
    __tablename__ = "saved_views"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False)
    view_id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    scope: Mapped[str] = mapped_column(String(20), nullable=False, default="upcoming")
    status: Mapped[str] = mapped_column(String(40), nullable=False, default="all")
    driver: Mapped[str] = mapped_column(String(200), nullable=False, default="all")
    payment: Mapped[str] = mapped_column(String(40), nullable=False, default="all")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("uq_saved_views_owner_view", "owner_id", "view_id", unique=True),
        Index("idx_saved_views_owner", "owner_id"),
    )
