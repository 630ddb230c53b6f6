import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from limitkeeper.models.channel_limit_edits import ChannelLimitEdits

logger = logging.getLogger(__name__)


def add_channel_limit_edit(
    db: Session, user_id: str, channel_id: str, limit: int
) -> ChannelLimitEdits:
    edit = ChannelLimitEdits(
        user_id=user_id, channel_id=channel_id, limit=limit, created_at=datetime.now(tz=UTC)
    )
    db.add(edit)
    db.flush()
    logger.debug(f"Appended edit {edit.id} for channel {channel_id}")
    return edit


def get_channel_limit_edits_page(
    db: Session, channel_id: str, after_id: int = 0, batch_size: int = 100
) -> list[ChannelLimitEdits]:
    """Return up to ``batch_size`` edits with an id above ``after_id``, oldest first."""
    return list(
        db.scalars(
            select(ChannelLimitEdits)
            .where(ChannelLimitEdits.channel_id == channel_id, ChannelLimitEdits.id > after_id)
            .order_by(ChannelLimitEdits.id)
            .limit(batch_size)
        )
    )
