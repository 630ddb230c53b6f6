from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from limitkeeper.models.base import Base


class ChannelLimits(Base):
    __tablename__ = "channel_limits"

    channel_id: Mapped[str] = mapped_column(Text, primary_key=True)
    limit: Mapped[int] = mapped_column("channel_limit", Integer, nullable=False)
