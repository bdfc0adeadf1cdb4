"""Application configuration primitives."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def _load_env(dotenv_path: Optional[Path] = None) -> None:
    """Load the .env file once for the process."""

    if getattr(_load_env, "_loaded", False):  # type: ignore[attr-defined]
        return

    load_dotenv(dotenv_path)
    setattr(_load_env, "_loaded", True)  # type: ignore[attr-defined]


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass(frozen=True)
class DatabaseSettings:
    """Configuration for the relational database."""

    driver: str = "mysql+pymysql"
    user: str = "levelup"
    password: str = "levelup"
    host: str = "127.0.0.1"
    port: int = 3306
    name: str = "levelup"

    @classmethod
    def from_env(cls) -> "DatabaseSettings":
        """Instantiate settings using environment overrides when present."""

        defaults = cls()
        return cls(
            driver=os.getenv("DB_DRIVER", defaults.driver),
            user=os.getenv("DB_USER", defaults.user),
            password=os.getenv("DB_PASSWORD", defaults.password),
            host=os.getenv("DB_HOST", defaults.host),
            port=int(os.getenv("DB_PORT", defaults.port)),
            name=os.getenv("DB_NAME", defaults.name),
        )

    @property
    def sqlalchemy_url(self) -> str:
        """Return a SQLAlchemy compatible URL."""

        if self.driver.startswith("sqlite"):
            return f"{self.driver}:///{self.name}"
        return f"{self.driver}://{self.user}:{self.password}@{self.host}:{self.port}/{self.name}"


@dataclass(frozen=True)
class PromotionSettings:
    """Constants driving point aggregation and the recalculation worker.

    Grades were first recorded in ``grade_floor_year`` and credits only exist
    for ``max_data_year``; the window never reaches further back than
    ``lookback_cap`` years.
    """

    grade_floor_year: int = 2021
    max_data_year: int = 2025
    lookback_cap: int = 5
    default_grade_points: float = 2.0
    recalc_max_retries: int = 2
    recalc_retry_delay: float = 1.0

    @classmethod
    def from_env(cls) -> "PromotionSettings":
        defaults = cls()
        return cls(
            grade_floor_year=int(os.getenv("PROMOTION_GRADE_FLOOR_YEAR", defaults.grade_floor_year)),
            max_data_year=int(os.getenv("PROMOTION_MAX_DATA_YEAR", defaults.max_data_year)),
            lookback_cap=int(os.getenv("PROMOTION_LOOKBACK_CAP", defaults.lookback_cap)),
            default_grade_points=float(
                os.getenv("PROMOTION_DEFAULT_GRADE_POINTS", defaults.default_grade_points)
            ),
            recalc_max_retries=int(os.getenv("RECALC_MAX_RETRIES", defaults.recalc_max_retries)),
            recalc_retry_delay=float(os.getenv("RECALC_RETRY_DELAY", defaults.recalc_retry_delay)),
        )


@dataclass(frozen=True)
class Settings:
    """Container for application configuration."""

    database: DatabaseSettings
    promotion: PromotionSettings = field(default_factory=PromotionSettings)
    sqlalchemy_echo: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv_path: Optional[Path] = None) -> "Settings":
        """Build ``Settings`` using environment variables (optionally from ``.env``)."""

        _load_env(dotenv_path)

        return cls(
            database=DatabaseSettings.from_env(),
            promotion=PromotionSettings.from_env(),
            sqlalchemy_echo=_env_flag("SQLALCHEMY_ECHO"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


@lru_cache()
def get_settings(dotenv_path: Optional[Path] = None) -> Settings:
    """Return a cached settings instance."""

    return Settings.from_env(dotenv_path=dotenv_path)
