# ==============================================
# Configuration Management
# ==============================================
#
# PURPOSE:
#   Load and validate all configuration from environment
#   variables / .env file. Provides typed config objects
#   to all other modules.
#
# CLASSES:
# --------
# - MySQLConfig (dataclass)
#     host: str          (default "localhost")
#     port: int          (default 3306)
#     user: str          (default "root")
#     password: str      (default "root")
#     database: str      (default "term_locks")
#     table_prefix: str  (default "wp_")
#
# - MongoConfig (dataclass)
#     host: str          (default "localhost")
#     port: int          (default 27017)
#     user: str | None   (default None)
#     password: str | None (default None)
#     database: str      (default "term_locks")
#
# - LocksConfig (dataclass)
#     meta_key: str            (default "locks")
#     taxonomies: list[str]    (default [] → every taxonomy with a UI)
#     multisite: bool          (default False)
#     backend: str             ("memory" or "mysql", default "memory")
#
# - AppConfig (dataclass)
#     mysql: MySQLConfig
#     mongo: MongoConfig
#     locks: LocksConfig
#
# FUNCTION:
# ---------
# - get_config() -> AppConfig
#     Load .env using python-dotenv, construct AppConfig.
#     Returns the same singleton on repeated calls.
#
# USAGE:
# ------
#   from term_locks.config import get_config
#   config = get_config()
#   print(config.mysql.host)
#   print(config.locks.taxonomies)
#
# ==============================================

import os
from dataclasses import dataclass, field
from typing import List, Optional
from pathlib import Path

from dotenv import load_dotenv


BACKENDS = ("memory", "mysql")


@dataclass
class MySQLConfig:
    """MySQL database configuration (term meta + options)."""
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = "root"
    database: str = "term_locks"
    table_prefix: str = "wp_"


@dataclass
class MongoConfig:
    """MongoDB database configuration (roles)."""
    host: str = "localhost"
    port: int = 27017
    user: Optional[str] = None
    password: Optional[str] = None
    database: str = "term_locks"


@dataclass
class LocksConfig:
    """Which meta key and taxonomies the locks attach to."""
    meta_key: str = "locks"
    taxonomies: List[str] = field(default_factory=list)
    multisite: bool = False
    backend: str = "memory"


@dataclass
class AppConfig:
    """Main application configuration."""
    mysql: MySQLConfig
    mongo: MongoConfig
    locks: LocksConfig


# Singleton instance
_config_instance: Optional[AppConfig] = None


def _split_list(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def _as_bool(raw: str) -> bool:
    return raw.strip().lower() in ("1", "true", "yes", "on")


def get_config() -> AppConfig:
    """
    Load configuration from environment variables / .env file.
    Returns the same singleton instance on repeated calls.

    Returns:
        AppConfig: Application configuration

    Raises:
        ValueError: If TERM_LOCKS_BACKEND names an unknown backend
    """
    global _config_instance

    if _config_instance is not None:
        return _config_instance

    # Load .env file from project root
    env_path = Path(__file__).parent.parent / ".env"
    load_dotenv(dotenv_path=env_path)

    # Build MySQL configuration
    mysql_config = MySQLConfig(
        host=os.getenv("MYSQL_HOST", "localhost"),
        port=int(os.getenv("MYSQL_PORT", "3306")),
        user=os.getenv("MYSQL_USER", "root"),
        password=os.getenv("MYSQL_PASSWORD", "root"),
        database=os.getenv("MYSQL_DATABASE", "term_locks"),
        table_prefix=os.getenv("MYSQL_TABLE_PREFIX", "wp_")
    )

    # Build MongoDB configuration
    mongo_config = MongoConfig(
        host=os.getenv("MONGO_HOST", "localhost"),
        port=int(os.getenv("MONGO_PORT", "27017")),
        user=os.getenv("MONGO_USER") or None,
        password=os.getenv("MONGO_PASSWORD") or None,
        database=os.getenv("MONGO_DATABASE", "term_locks")
    )

    # Build locks configuration
    backend = os.getenv("TERM_LOCKS_BACKEND", "memory").strip().lower()
    if backend not in BACKENDS:
        raise ValueError(f"Unknown TERM_LOCKS_BACKEND '{backend}' (expected one of {BACKENDS})")

    locks_config = LocksConfig(
        meta_key=os.getenv("TERM_LOCKS_META_KEY", "locks"),
        taxonomies=_split_list(os.getenv("TERM_LOCKS_TAXONOMIES", "")),
        multisite=_as_bool(os.getenv("TERM_LOCKS_MULTISITE", "false")),
        backend=backend
    )

    # Build main application configuration
    _config_instance = AppConfig(
        mysql=mysql_config,
        mongo=mongo_config,
        locks=locks_config
    )

    return _config_instance
