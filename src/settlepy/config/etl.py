"""Ingestion and persistence defaults."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_float, env_int
from .errors import ConfigurationError

DEFAULT_BATCH_SIZE = 100
DEFAULT_AMOUNT_RANGE: tuple[float, float] = (0.0, 100_000_000.0)


@dataclass(frozen=True, slots=True)
class EtlConfig:
    batch_size: int = DEFAULT_BATCH_SIZE
    create_missing_references: bool = False
    fuzzy_references: bool = True
    amount_range: tuple[float, float] = DEFAULT_AMOUNT_RANGE


def get_etl_config() -> EtlConfig:
    amount_min = env_float("SETTLEPY_AMOUNT_MIN", default=DEFAULT_AMOUNT_RANGE[0])
    amount_max = env_float("SETTLEPY_AMOUNT_MAX", default=DEFAULT_AMOUNT_RANGE[1])
    if amount_min > amount_max:
        raise ConfigurationError(
            f"SETTLEPY_AMOUNT_MIN ({amount_min}) exceeds SETTLEPY_AMOUNT_MAX ({amount_max})"
        )
    return EtlConfig(
        batch_size=env_int("SETTLEPY_BATCH_SIZE", default=DEFAULT_BATCH_SIZE, minimum=1),
        create_missing_references=env_bool(
            "SETTLEPY_CREATE_MISSING_REFERENCES", default=False
        ),
        fuzzy_references=env_bool("SETTLEPY_FUZZY_REFERENCES", default=True),
        amount_range=(amount_min, amount_max),
    )
