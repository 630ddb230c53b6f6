import logging

from sqlalchemy import delete
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from limitkeeper.models.channel_limits import ChannelLimits

logger = logging.getLogger(__name__)

UPSERT_DIALECTS = {"sqlite": sqlite.insert, "postgresql": postgresql.insert}


def get_channel_limit(db: Session, channel_id: str) -> ChannelLimits | None:
    return db.query(ChannelLimits).filter(ChannelLimits.channel_id == channel_id).first()


def get_channel_limits(db: Session) -> list[ChannelLimits]:
    return db.query(ChannelLimits).order_by(ChannelLimits.channel_id).all()


def upsert_channel_limit(db: Session, channel_id: str, limit: int):
    """Insert or overwrite the current limit in a single statement. Does not commit.

    The statement locks the channel row (the whole database on SQLite) until
    the transaction ends, so racing writers to one channel run one after the
    other and a missing row is created exactly once.
    """
    table = ChannelLimits.__table__
    insert = UPSERT_DIALECTS[db.get_bind().dialect.name]
    statement = insert(table).values({table.c.channel_id: channel_id, table.c.channel_limit: limit})
    statement = statement.on_conflict_do_update(
        index_elements=[table.c.channel_id],
        set_={table.c.channel_limit: statement.excluded.channel_limit},
    )
    db.execute(statement)
    logger.debug(f"Upserted channel limit for channel {channel_id}")


def delete_channel_limit(db: Session, channel_id: str) -> int | None:
    """Delete the current limit and return it, or None if there was none. Does not commit."""
    removed_limit = db.execute(
        delete(ChannelLimits)
        .where(ChannelLimits.channel_id == channel_id)
        .returning(ChannelLimits.limit)
    ).scalar_one_or_none()
    if removed_limit is not None:
        logger.debug(f"Deleting channel limit for channel {channel_id}")
    return removed_limit
