"""Shared SQLAlchemy model mixins."""

from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column


class LoadAuditMixin:
    """Columns the ETL pipeline stamps on every raw row it loads.

    The analytics gateway never reads them; they exist so operators can trace
    a row back to the load that produced it.
    """

    loaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    source_batch: Mapped[str | None] = mapped_column(String(64), nullable=True)
