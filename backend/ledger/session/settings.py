"""Ledger service configuration via environment variables."""

from decimal import Decimal

from pydantic import Field
from pydantic_settings import BaseSettings


class LedgerSettings(BaseSettings):
    model_config = {"env_prefix": "LEDGER_"}

    default_ruleset_id: str = Field(default="hongkong", min_length=1)
    points_per_unit: Decimal = Field(default=Decimal(10), gt=0)  # settlement divisor
    money_decimal_places: int = Field(default=0, ge=0, le=2)
    snapshot_dir: str = Field(default="backend/data/sessions", min_length=1)
    log_dir: str = Field(default="backend/logs/ledger", min_length=1)
    max_sessions: int = Field(default=100, ge=1)
