import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from limitkeeper.errors import InvalidInputError
from limitkeeper.validation import LimitBounds

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///database/database.sqlite"
DEFAULT_LOG_FILE = "limitkeeper.log"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Config:
    database_url: str = DEFAULT_DATABASE_URL
    database_timeout: float = 5.0
    limit_min: int | None = None
    limit_max: int | None = None
    log_file: str = DEFAULT_LOG_FILE
    echo_sql: bool = False

    @property
    def bounds(self) -> LimitBounds:
        return LimitBounds(self.limit_min, self.limit_max)


def _invalid_setting(name: str, value: str, expected: str) -> InvalidInputError:
    return InvalidInputError(
        code="invalid_setting",
        message=f"{name} must be {expected}, got {value!r}",
    )


def _env_int(name: str) -> int | None:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        raise _invalid_setting(name, value, "an integer") from None


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        timeout = float(value)
    except ValueError:
        raise _invalid_setting(name, value, "a number") from None
    if timeout <= 0:
        raise _invalid_setting(name, value, "a positive number")
    return timeout


def _env_bool(name: str) -> bool:
    value = os.environ.get(name, "").strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise _invalid_setting(name, value, "true or false")


def load_config(env_file: str | None = None) -> Config:
    """Read settings from the environment after loading a .env file."""
    load_dotenv(env_file)
    config = Config(
        database_url=os.environ.get("LIMITKEEPER_DATABASE_URL", DEFAULT_DATABASE_URL),
        database_timeout=_env_float("LIMITKEEPER_DATABASE_TIMEOUT", 5.0),
        limit_min=_env_int("LIMITKEEPER_LIMIT_MIN"),
        limit_max=_env_int("LIMITKEEPER_LIMIT_MAX"),
        log_file=os.environ.get("LIMITKEEPER_LOG_FILE", DEFAULT_LOG_FILE),
        echo_sql=_env_bool("LIMITKEEPER_ECHO_SQL"),
    )
    # Rejects inverted or non-positive bounds at startup.
    LimitBounds(config.limit_min, config.limit_max)
    logger.debug(f"Loaded config: {config}")
    return config
