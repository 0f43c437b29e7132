from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


class CustomGpt(Base):
    __tablename__ = "custom_gpts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    gpt_url: Mapped[str] = mapped_column(String(2083), nullable=False)
    prompt_template: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # Ordered list of {"label", "type", "options", "required", "key"?} dicts
    prompt_fields: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    icon_url: Mapped[str] = mapped_column(String(2083), nullable=False, default="")
    category: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
