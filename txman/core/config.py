# coding: utf-8
"""
Configuration for txman.

Settings are a plain pydantic model so they can be built in code, or read
from the environment (optionally seeded from a ``.env`` file):

    TXMAN_DATABASE            SQLite database path        (txman.db)
    TXMAN_TIMEOUT             Connection timeout seconds  (30.0)
    TXMAN_JOURNAL_MODE        SQLite journal mode         (WAL)
    TXMAN_FOREIGN_KEYS        Enforce foreign keys        (true)
    TXMAN_TRANSACTION_MODE    SQLite BEGIN mode           (DEFERRED)
    TXMAN_ROLLBACK_ON_ERROR   Roll back when callback raises (false)
    TXMAN_LOG_LEVEL           Package log level           (WARNING)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "TXMAN_"

JOURNAL_MODES = {"DELETE", "TRUNCATE", "PERSIST", "MEMORY", "WAL", "OFF"}
TRANSACTION_MODES = {"DEFERRED", "IMMEDIATE", "EXCLUSIVE"}


class TxManSettings(BaseModel):
    """Settings for a TxMan backed by SQLite."""

    database: str = Field(default="txman.db", description="SQLite database path")
    timeout: float = Field(default=30.0, gt=0, description="Connection timeout in seconds")
    journal_mode: str = Field(default="WAL", description="SQLite journal mode")
    foreign_keys: bool = Field(default=True, description="Enable foreign key enforcement")
    transaction_mode: str = Field(
        default="DEFERRED",
        description="SQLite BEGIN mode for read-write transactions",
    )
    rollback_on_error: bool = Field(
        default=False,
        description="Roll back instead of commit when the callback raises",
    )
    log_level: str = Field(default="WARNING", description="Log level for the txman logger")

    model_config = {"frozen": True, "extra": "forbid"}

    @field_validator("journal_mode")
    @classmethod
    def validate_journal_mode(cls, v: str) -> str:
        """Normalize and check the journal mode."""
        mode = v.upper()
        if mode not in JOURNAL_MODES:
            raise ValueError(f"journal_mode must be one of {sorted(JOURNAL_MODES)}")
        return mode

    @field_validator("transaction_mode")
    @classmethod
    def validate_transaction_mode(cls, v: str) -> str:
        """Normalize and check the BEGIN mode."""
        mode = v.upper()
        if mode not in TRANSACTION_MODES:
            raise ValueError(f"transaction_mode must be one of {sorted(TRANSACTION_MODES)}")
        return mode

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the log level name."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def log_level_value(self) -> int:
        """Numeric value of the log level."""
        return logging.getLevelName(self.log_level)

    @classmethod
    def from_env(cls, dotenv_path: Optional[Union[str, Path]] = None) -> "TxManSettings":
        """
        Build settings from ``TXMAN_*`` environment variables.

        Args:
            dotenv_path: Optional ``.env`` file loaded first; variables
                already set in the environment win

        Returns:
            TxManSettings with unset variables left at their defaults
        """
        if dotenv_path is not None:
            load_dotenv(dotenv_path)

        values = {}
        for name in cls.model_fields:
            raw = os.getenv(ENV_PREFIX + name.upper())
            if raw is not None:
                values[name] = raw
        return cls(**values)


def configure_logging(level: Union[int, str] = logging.WARNING) -> logging.Logger:
    """
    Set the level of the package logger.

    Handlers are left to the application; this only adjusts the ``txman``
    logger so DEBUG tracing can be switched on without touching the root.
    """
    package_logger = logging.getLogger("txman")
    package_logger.setLevel(level)
    return package_logger
