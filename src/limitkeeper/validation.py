from dataclasses import dataclass

from limitkeeper.errors import InvalidInputError

# Written to the edit log when a channel's limit is removed.
REMOVED_LIMIT = 0


@dataclass(frozen=True)
class LimitBounds:
    minimum: int | None = None
    maximum: int | None = None

    def __post_init__(self) -> None:
        for name, value in (("minimum", self.minimum), ("maximum", self.maximum)):
            if value is not None and (not is_int(value) or value <= REMOVED_LIMIT):
                raise InvalidInputError(
                    code="invalid_bounds",
                    message=f"Limit {name} must be a positive integer, got {value!r}",
                )
        if self.minimum is not None and self.maximum is not None and self.minimum > self.maximum:
            raise InvalidInputError(
                code="invalid_bounds",
                message=f"Limit minimum {self.minimum} is greater than maximum {self.maximum}",
            )

    def check(self, limit: int) -> None:
        if (self.minimum is not None and limit < self.minimum) or (
            self.maximum is not None and limit > self.maximum
        ):
            raise InvalidInputError(
                code="limit_out_of_bounds",
                message=f"The limit should be between {self.describe()}, got {limit}",
                details={"actual_value": limit, "minimum": self.minimum, "maximum": self.maximum},
            )

    def describe(self) -> str:
        low = "1" if self.minimum is None else str(self.minimum)
        high = "unbounded" if self.maximum is None else str(self.maximum)
        return f"{low} and {high}"


def is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_identifier(value: str | int, field: str) -> str:
    """Normalise a channel or user id to a non-empty string.

    Discord snowflakes arrive as ints and are stored as their decimal text.
    """
    if is_int(value):
        return str(value)
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(
            code=f"invalid_{field}",
            message=f"{field} must be a non-empty string, got {value!r}",
        )
    return value.strip()


def validate_limit(limit: int, bounds: LimitBounds | None = None) -> int:
    if not is_int(limit):
        raise InvalidInputError(
            code="invalid_limit", message=f"Limit must be an integer, got {limit!r}"
        )
    if limit <= REMOVED_LIMIT:
        raise InvalidInputError(
            code="invalid_limit",
            message=f"Limit must be a positive integer, 0 is reserved for removals, got {limit}",
            details={"actual_value": limit},
        )
    if bounds is not None:
        bounds.check(limit)
    return limit
