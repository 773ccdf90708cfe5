"""Runtime configuration.

Every setting can be overridden through a ``BANKBOOKS_*`` environment
variable; the CLI reads them once at start-up.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from bankbooks.domain.chart import BANK_ACCOUNT_CODE, OPENING_BALANCE_EQUITY_CODE


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""


@dataclass(frozen=True)
class Settings:
    """Application settings."""

    database_path: Optional[str] = None
    bank_account_code: str = BANK_ACCOUNT_CODE
    equity_account_code: str = OPENING_BALANCE_EQUITY_CODE
    created_by: str = "SYSTEM"
    log_level: str = "WARNING"

    def validate(self) -> None:
        if not self.bank_account_code.strip():
            raise ConfigValidationError("bank_account_code must not be empty")
        if not self.equity_account_code.strip():
            raise ConfigValidationError("equity_account_code must not be empty")
        if self.bank_account_code == self.equity_account_code:
            raise ConfigValidationError("bank and equity account codes must differ")
        if logging.getLevelName(self.log_level.upper()) not in (
            logging.DEBUG,
            logging.INFO,
            logging.WARNING,
            logging.ERROR,
            logging.CRITICAL,
        ):
            raise ConfigValidationError(f"Unknown log level '{self.log_level}'")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from environment variables.

    Args:
        environ: Mapping to read instead of ``os.environ``

    Raises:
        ConfigValidationError: If a value is invalid
    """
    env = os.environ if environ is None else environ
    settings = Settings(
        database_path=env.get("BANKBOOKS_DB_PATH"),
        bank_account_code=env.get("BANKBOOKS_BANK_ACCOUNT_CODE", BANK_ACCOUNT_CODE),
        equity_account_code=env.get("BANKBOOKS_EQUITY_ACCOUNT_CODE", OPENING_BALANCE_EQUITY_CODE),
        created_by=env.get("BANKBOOKS_CREATED_BY", "SYSTEM"),
        log_level=env.get("BANKBOOKS_LOG_LEVEL", "WARNING"),
    )
    settings.validate()
    return settings
