from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from online_catalog.db import Base
from online_catalog.models.user import utcnow

THEMES = ("default",) + tuple(f"gradient-{i}" for i in range(1, 10))


class CatalogPlan(str, PyEnum):
    BASIC = "basic"
    PRO = "pro"
    BUSINESS = "business"

    @property
    def label(self) -> str:
        return {
            CatalogPlan.BASIC: "الباقة الأساسية",
            CatalogPlan.PRO: "الباقة الاحترافية",
            CatalogPlan.BUSINESS: "باقة الأعمال",
        }[self]


class Catalog(Base):
    __tablename__ = "catalogs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True
    )
    # URL slug
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    display_name: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    slogan: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    logo_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    cover_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    whatsapp_number: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    country_code: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    theme: Mapped[str] = mapped_column(String(32), nullable=False, default="default")
    plan: Mapped[CatalogPlan] = mapped_column(
        Enum(
            CatalogPlan,
            name="catalog_plan_enum",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        default=CatalogPlan.BASIC,
    )
    enable_subcategories: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_open: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    owner: Mapped["User"] = relationship("User", back_populates="catalog")

    @property
    def store_name(self) -> str:
        return self.display_name or self.name
