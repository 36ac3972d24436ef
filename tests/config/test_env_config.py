from __future__ import annotations

import pytest

from settlepy.config import (
    DEFAULT_BATCH_SIZE,
    ConfigurationError,
    MissingConfigurationError,
    env_bool,
    env_int,
    get_etl_config,
    require_env_vars,
)

ETL_VARS = (
    "SETTLEPY_BATCH_SIZE",
    "SETTLEPY_CREATE_MISSING_REFERENCES",
    "SETTLEPY_FUZZY_REFERENCES",
    "SETTLEPY_AMOUNT_MIN",
    "SETTLEPY_AMOUNT_MAX",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ETL_VARS:
        monkeypatch.delenv(name, raising=False)


def test_require_env_vars_reports_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PRESENT_VAR", "value")
    monkeypatch.setenv("BLANK_VAR", "   ")
    monkeypatch.delenv("ABSENT_VAR", raising=False)

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["PRESENT_VAR", "BLANK_VAR", "ABSENT_VAR"])

    assert "ABSENT_VAR, BLANK_VAR" in str(exc.value)
    assert require_env_vars(["PRESENT_VAR"]) == {"PRESENT_VAR": "value"}


@pytest.mark.parametrize(("raw", "expected"), [("yes", True), (" OFF ", False), ("", True)])
def test_env_bool(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
    monkeypatch.setenv("FLAG", raw)

    assert env_bool("FLAG", default=True) is expected


def test_env_bool_rejects_unknown_tokens(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLAG", "maybe")

    with pytest.raises(ConfigurationError, match="FLAG"):
        env_bool("FLAG", default=False)


def test_env_int_checks_minimum(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SIZE", "0")

    with pytest.raises(ConfigurationError, match=">= 1"):
        env_int("SIZE", default=5, minimum=1)
    monkeypatch.setenv("SIZE", "abc")
    with pytest.raises(ConfigurationError, match="integer"):
        env_int("SIZE", default=5)


def test_etl_defaults() -> None:
    config = get_etl_config()

    assert config.batch_size == DEFAULT_BATCH_SIZE
    assert not config.create_missing_references
    assert config.fuzzy_references
    assert config.amount_range == (0.0, 100_000_000.0)


def test_etl_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SETTLEPY_BATCH_SIZE", "25")
    monkeypatch.setenv("SETTLEPY_CREATE_MISSING_REFERENCES", "true")
    monkeypatch.setenv("SETTLEPY_FUZZY_REFERENCES", "0")
    monkeypatch.setenv("SETTLEPY_AMOUNT_MAX", "5000000")

    config = get_etl_config()

    assert config.batch_size == 25
    assert config.create_missing_references
    assert not config.fuzzy_references
    assert config.amount_range == (0.0, 5_000_000.0)


def test_etl_rejects_inverted_amount_range(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SETTLEPY_AMOUNT_MIN", "10")
    monkeypatch.setenv("SETTLEPY_AMOUNT_MAX", "1")

    with pytest.raises(ConfigurationError, match="SETTLEPY_AMOUNT_MIN"):
        get_etl_config()
