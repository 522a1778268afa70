"""AiUsageLog ORM — one row per successful AI call, counted by the quota check.

Invariants:
    - Rows are append-only; the quota window is computed at read time
    - (user_id, call_type, request_timestamp) indexed for the window count
"""

from datetime import datetime, timezone

from sqlalchemy import Index, Integer, String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from mathtutor.db.base import Base


class AiUsageLog(Base):
    """AI usage log entry."""
    __tablename__ = "ai_usage_logs"
    __table_args__ = (
        Index(
            "ix_ai_usage_logs_user_call_ts",
            "user_id", "call_type", "request_timestamp",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    call_type: Mapped[str] = mapped_column(String(40), nullable=False)
    request_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
