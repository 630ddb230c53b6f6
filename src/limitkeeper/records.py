from dataclasses import dataclass
from datetime import UTC, datetime

from limitkeeper.models.channel_limit_edits import ChannelLimitEdits
from limitkeeper.models.channel_limits import ChannelLimits
from limitkeeper.validation import REMOVED_LIMIT


@dataclass(frozen=True)
class ChannelLimit:
    channel_id: str
    limit: int

    @classmethod
    def from_row(cls, row: ChannelLimits) -> "ChannelLimit":
        return cls(channel_id=row.channel_id, limit=row.limit)


@dataclass(frozen=True)
class EditRecord:
    """One accepted change, detached from the session that loaded it.

    ``sequence`` is the commit-order position of the edit in the log.
    """

    user_id: str
    channel_id: str
    limit: int
    created_at: datetime
    sequence: int

    @property
    def is_removal(self) -> bool:
        return self.limit == REMOVED_LIMIT

    @classmethod
    def from_row(cls, row: ChannelLimitEdits) -> "EditRecord":
        created_at = row.created_at
        # SQLite drops the offset; values are always written in UTC.
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=UTC)
        return cls(
            user_id=row.user_id,
            channel_id=row.channel_id,
            limit=row.limit,
            created_at=created_at,
            sequence=row.id,
        )
