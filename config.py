"""Configuration and environment settings"""

import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from pydantic_settings import BaseSettings

from core.exceptions import ConfigurationError
from core.models import ConnectionParams, ProgressPolicy


class Settings(BaseSettings):
    """Application configuration"""

    # Engine connection
    MYSQL_HOST: str = "localhost"
    MYSQL_PORT: int = 3306
    MYSQL_USER: str = "root"
    MYSQL_PASSWORD: str = ""
    MYSQL_SOCKET: Optional[str] = None  # Takes precedence over host/port

    # External programs
    MYSQL_BIN: str = "mysql"
    MYSQLDUMP_BIN: str = "mysqldump"

    # Dump directories (relative to DUMPS_ROOT)
    DUMPS_ROOT: str = "."
    FULL_DIR: str = "full"
    SLIM_DIR: str = "slim"
    SNAPSHOT_DIR: str = "snapshots"
    EXCLUDE_TABLES_FILE: str = "config/exclude-tables.txt"

    # Naming
    WORKSPACE_SUFFIX: str = "_temp"
    SLIM_SUFFIX: str = "_slim"

    # New databases
    DATABASE_CHARSET: str = "utf8mb4"
    DATABASE_COLLATION: str = "utf8mb4_unicode_ci"

    # Progress
    PROGRESS_INTERVAL: float = 0.2  # seconds
    EXPORT_PROGRESS_CAP: int = 95
    EXPORT_BYTES_PER_PERCENT: int = 1024 * 1024

    LOG_LEVEL: str = "WARNING"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

    def get_connection_params(self) -> ConnectionParams:
        """Validated connection parameters"""
        try:
            return ConnectionParams(
                host=self.MYSQL_HOST,
                port=self.MYSQL_PORT,
                user=self.MYSQL_USER,
                password=self.MYSQL_PASSWORD,
                socket=self.MYSQL_SOCKET,
            )
        except ValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ConfigurationError(f"Invalid connection settings: {errors}") from e

    def get_progress_policy(self) -> ProgressPolicy:
        """Progress event tuning"""
        return ProgressPolicy(
            interval=self.PROGRESS_INTERVAL,
            cap=self.EXPORT_PROGRESS_CAP,
            bytes_per_percent=self.EXPORT_BYTES_PER_PERCENT,
        )

    def resolve(self, path: str) -> Path:
        """Resolve a path against DUMPS_ROOT"""
        resolved = Path(path).expanduser()
        if resolved.is_absolute():
            return resolved
        return Path(self.DUMPS_ROOT).expanduser() / resolved

    def get_output_path(self, subdir: str = "") -> Path:
        """Get output directory path"""
        path = self.resolve(subdir) if subdir else Path(self.DUMPS_ROOT).expanduser()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def get_exclusions_path(self) -> Path:
        """Location of the exclusion list"""
        return self.resolve(self.EXCLUDE_TABLES_FILE)


def configure_logging(level: Optional[str] = None) -> None:
    """Set up root logging once at startup"""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="[%(asctime)s] %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


settings = Settings()
