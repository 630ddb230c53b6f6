"""Channel limits and their edit history.

All writes go through ``LimitStore``: each one changes the current limit and
appends to the edit log inside a single transaction, so a reader never sees
one table ahead of the other. The store keeps no state between calls and is
safe to share between threads.
"""

import logging
from collections.abc import Iterator

from limitkeeper.config import Config
from limitkeeper.crud.channel_limit_edits import (
    add_channel_limit_edit,
    get_channel_limit_edits_page,
)
from limitkeeper.crud.channel_limits import (
    delete_channel_limit,
    get_channel_limit,
    get_channel_limits,
    upsert_channel_limit,
)
from limitkeeper.database import Database, storage_errors
from limitkeeper.errors import ChannelLimitNotFoundError
from limitkeeper.records import ChannelLimit, EditRecord
from limitkeeper.validation import REMOVED_LIMIT, LimitBounds, validate_identifier, validate_limit

logger = logging.getLogger(__name__)


class EditHistory:
    """Edits of one channel in commit order.

    Nothing is read until iteration starts. Edits are fetched in pages of
    ``batch_size``, each in its own short session, so no connection or lock is
    held between yields. Every iteration starts again from the oldest edit and
    sees edits committed since the last one.
    """

    def __init__(self, database: Database, channel_id: str, batch_size: int = 100):
        self.database: Database = database
        self.channel_id: str = channel_id
        self.batch_size: int = batch_size

    def __iter__(self) -> Iterator[EditRecord]:
        last_id = 0
        while True:
            with storage_errors(f"reading history of channel {self.channel_id}"):
                with self.database.Session() as db:
                    page = [
                        EditRecord.from_row(row)
                        for row in get_channel_limit_edits_page(
                            db, self.channel_id, last_id, self.batch_size
                        )
                    ]
            yield from page
            if len(page) < self.batch_size:
                return
            last_id = page[-1].sequence

    def __repr__(self) -> str:
        return f"EditHistory(channel_id={self.channel_id!r})"


class LimitStore:
    def __init__(self, database: Database, bounds: LimitBounds | None = None):
        self.database: Database = database
        self.bounds: LimitBounds | None = bounds

    @classmethod
    def from_config(cls, config: Config) -> "LimitStore":
        database = Database(config.database_url, timeout=config.database_timeout, echo=config.echo_sql)
        database.create_schema()
        return cls(database, bounds=config.bounds)

    def set_limit(self, channel_id: str | int, limit: int, user_id: str | int) -> int:
        channel_id = validate_identifier(channel_id, "channel_id")
        user_id = validate_identifier(user_id, "user_id")
        limit = validate_limit(limit, self.bounds)

        with storage_errors(f"setting limit of channel {channel_id}"):
            with self.database.Session.begin() as db:
                # The upsert locks the channel first, so edit ids follow commit order.
                upsert_channel_limit(db, channel_id, limit)
                edit = add_channel_limit_edit(db, user_id, channel_id, limit)
                sequence = edit.id
        logger.info(f"User {user_id} set limit of channel {channel_id} to {limit} (edit {sequence})")
        return limit

    def remove_limit(self, channel_id: str | int, user_id: str | int) -> int | None:
        """Remove the current limit and log the removal.

        Returns the removed limit, or None when the channel had no limit, in
        which case nothing is written.
        """
        channel_id = validate_identifier(channel_id, "channel_id")
        user_id = validate_identifier(user_id, "user_id")

        with storage_errors(f"removing limit of channel {channel_id}"):
            with self.database.Session.begin() as db:
                removed_limit = delete_channel_limit(db, channel_id)
                if removed_limit is not None:
                    add_channel_limit_edit(db, user_id, channel_id, REMOVED_LIMIT)
        if removed_limit is None:
            logger.info(f"Channel {channel_id} has no limit to remove")
        else:
            logger.info(f"User {user_id} removed limit ({removed_limit}) from channel {channel_id}")
        return removed_limit

    def get_limit(self, channel_id: str | int) -> int | None:
        channel_id = validate_identifier(channel_id, "channel_id")
        with storage_errors(f"reading limit of channel {channel_id}"):
            with self.database.Session() as db:
                channel_limit = get_channel_limit(db, channel_id)
                limit = None if channel_limit is None else channel_limit.limit
        logger.debug(f"Limit of channel {channel_id}: {limit}")
        return limit

    def require_limit(self, channel_id: str | int) -> int:
        limit = self.get_limit(channel_id)
        if limit is None:
            raise ChannelLimitNotFoundError(
                code="channel_limit_not_found",
                message=f"Channel {channel_id} doesn't have a limit",
                details={"channel_id": str(channel_id)},
            )
        return limit

    def get_all_limits(self) -> list[ChannelLimit]:
        with storage_errors("reading all channel limits"):
            with self.database.Session() as db:
                limits = [ChannelLimit.from_row(row) for row in get_channel_limits(db)]
        logger.debug(f"Read {len(limits)} channel limits")
        return limits

    def get_history(self, channel_id: str | int) -> EditHistory:
        return EditHistory(self.database, validate_identifier(channel_id, "channel_id"))
