from datetime import datetime

from sqlalchemy import DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from limitkeeper.models.base import Base


class ChannelLimitEdits(Base):
    """Append-only audit log of channel limit changes.

    ``id`` is the commit-order marker: rows are ordered by it rather than by
    ``created_at``, which comes from the writer's clock.
    """

    __tablename__ = "channel_limit_edits"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    user_id: Mapped[str] = mapped_column(Text, nullable=False)
    channel_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    limit: Mapped[int] = mapped_column("channel_limit", Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
