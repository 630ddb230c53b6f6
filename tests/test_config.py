import os
from collections.abc import Iterator
from pathlib import Path

import pytest

from limitkeeper.config import DEFAULT_DATABASE_URL, Config, load_config
from limitkeeper.errors import InvalidInputError
from limitkeeper.store import LimitStore
from limitkeeper.validation import LimitBounds

SETTINGS = (
    "LIMITKEEPER_DATABASE_URL",
    "LIMITKEEPER_DATABASE_TIMEOUT",
    "LIMITKEEPER_LIMIT_MIN",
    "LIMITKEEPER_LIMIT_MAX",
    "LIMITKEEPER_LOG_FILE",
    "LIMITKEEPER_ECHO_SQL",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[Path]:
    for name in SETTINGS:
        monkeypatch.delenv(name, raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("")
    yield env_file
    # load_dotenv writes to os.environ behind monkeypatch's back.
    for name in SETTINGS:
        os.environ.pop(name, None)


def test_defaults(clean_environment: Path) -> None:
    config = load_config(str(clean_environment))

    assert config == Config()
    assert config.database_url == DEFAULT_DATABASE_URL
    assert config.bounds == LimitBounds()


def test_reads_values_from_env_file(clean_environment: Path) -> None:
    clean_environment.write_text(
        "LIMITKEEPER_DATABASE_URL=sqlite:///limits.sqlite\n"
        "LIMITKEEPER_DATABASE_TIMEOUT=2.5\n"
        "LIMITKEEPER_LIMIT_MIN=5\n"
        "LIMITKEEPER_LIMIT_MAX=500\n"
        "LIMITKEEPER_ECHO_SQL=true\n"
    )

    config = load_config(str(clean_environment))

    assert config.database_url == "sqlite:///limits.sqlite"
    assert config.database_timeout == 2.5
    assert config.bounds == LimitBounds(5, 500)
    assert config.echo_sql is True


def test_environment_wins_over_env_file(
    clean_environment: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    clean_environment.write_text("LIMITKEEPER_LIMIT_MAX=500\n")
    monkeypatch.setenv("LIMITKEEPER_LIMIT_MAX", "50")

    assert load_config(str(clean_environment)).limit_max == 50


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("LIMITKEEPER_LIMIT_MIN", "five"),
        ("LIMITKEEPER_DATABASE_TIMEOUT", "-1"),
        ("LIMITKEEPER_DATABASE_TIMEOUT", "soon"),
        ("LIMITKEEPER_ECHO_SQL", "maybe"),
    ],
)
def test_malformed_settings_are_rejected(
    clean_environment: Path, monkeypatch: pytest.MonkeyPatch, name: str, value: str
) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(InvalidInputError) as exc_info:
        load_config(str(clean_environment))

    assert name in str(exc_info.value)


def test_inverted_bounds_fail_at_load_time(
    clean_environment: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("LIMITKEEPER_LIMIT_MIN", "500")
    monkeypatch.setenv("LIMITKEEPER_LIMIT_MAX", "5")

    with pytest.raises(InvalidInputError):
        load_config(str(clean_environment))


def test_store_from_config_provisions_schema_and_bounds(tmp_path: Path) -> None:
    url = f"sqlite:///{tmp_path / 'database' / 'database.sqlite'}"
    store = LimitStore.from_config(Config(database_url=url, limit_min=5, limit_max=500))
    try:
        assert (tmp_path / "database" / "database.sqlite").exists()
        assert store.bounds == LimitBounds(5, 500)
        assert store.set_limit("general", 5, "alice") == 5
        with pytest.raises(InvalidInputError):
            store.set_limit("general", 4, "alice")
    finally:
        store.database.dispose()
