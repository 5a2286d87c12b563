"""
Module: config.py

Description:
Configuration and logging setup for doc-archive. Configuration precedence:
1. Environment variables (e.g., DOC_ARCHIVE_DOCS_ROOT)
2. Values in doc-archive.json (in the current working directory)
3. Default values defined in this module.

Logging is handled by Loguru. Standard library `logging` records (from this
package's modules and from httpx) are forwarded into Loguru by an
InterceptHandler. Log output goes to stderr so command output stays pipeable.

Third-party packages:
- Loguru: https://loguru.readthedocs.io/
- Pydantic: https://docs.pydantic.dev/

Sample doc-archive.json:
{
  "DOCS_ROOT": "~/docs",
  "CRAWL_DEPTH": 3
}

Sample environment variable setting:
export DOC_ARCHIVE_PROBE_TIMEOUT=10
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict

ENV_PREFIX = "DOC_ARCHIVE_"
CONFIG_FILENAME = "doc-archive.json"
MANIFEST_FILENAME = "manifest.json"

# --- Defaults ---
_DEFAULT_DOCS_ROOT = "."
_DEFAULT_PROBE_TIMEOUT = 5
_DEFAULT_TIMEOUT_REQUESTS = 30
_DEFAULT_CRAWL_DEPTH = 5
_DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
NOISY_LOGGERS = ("httpx", "httpcore")


# --- Logging ---


class InterceptHandler(logging.Handler):
    """Routes standard library logging records into Loguru."""

    def emit(self, record):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def configure_logging(level: str = _DEFAULT_LOG_LEVEL, sink=None) -> None:
    """Installs the Loguru handler and the stdlib intercept at `level`."""
    level = level.upper()
    logger.remove()
    logger.add(sink or sys.stderr, format=LOG_FORMAT, level=level)
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    noisy_level = logging.DEBUG if level == "DEBUG" else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)


# --- Settings ---


class Settings(BaseModel):
    """Resolved configuration values."""

    model_config = ConfigDict(frozen=True)

    docs_root: Path
    probe_timeout: int = _DEFAULT_PROBE_TIMEOUT
    timeout_requests: int = _DEFAULT_TIMEOUT_REQUESTS
    crawl_depth: int = _DEFAULT_CRAWL_DEPTH
    log_level: str = _DEFAULT_LOG_LEVEL

    @property
    def manifest_path(self) -> Path:
        return self.docs_root / MANIFEST_FILENAME


def _load_config_file(config_path: Path) -> Dict[str, Any]:
    if not config_path.exists():
        logger.debug(
            f"Configuration file not found at {config_path}. Using defaults and environment variables."
        )
        return {}
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.warning(f"Error decoding JSON from {config_path}: {e}. File ignored.")
        return {}
    except OSError as e:
        logger.warning(f"Could not read {config_path}: {e}. File ignored.")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"{config_path} does not hold a JSON object. File ignored.")
        return {}
    logger.debug(f"Successfully loaded configuration from {config_path}")
    return data


def _resolve(key: str, file_data: Dict[str, Any], env: Dict[str, str]) -> Optional[Any]:
    env_value = env.get(ENV_PREFIX + key)
    if env_value:
        return env_value
    return file_data.get(key)


def _resolve_positive_int(
    key: str, default: int, file_data: Dict[str, Any], env: Dict[str, str]
) -> int:
    raw = _resolve(key, file_data, env)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except (ValueError, TypeError):
        logger.warning(f"Invalid integer value for {key}: '{raw}'. Using default {default}.")
        return default
    if value <= 0:
        logger.warning(
            f"{key} must be positive ({value} provided). Resetting to default {default}."
        )
        return default
    return value


def load_settings(
    config_path: Optional[Path] = None, env: Optional[Dict[str, str]] = None
) -> Settings:
    """
    Resolves settings from the environment, the config file and defaults.

    Args:
        config_path: Config file location (default: ./doc-archive.json).
        env: Environment mapping (default: os.environ).
    """
    env = dict(os.environ) if env is None else env
    config_path = config_path or Path.cwd() / CONFIG_FILENAME
    file_data = _load_config_file(config_path)

    docs_root_raw = _resolve("DOCS_ROOT", file_data, env) or _DEFAULT_DOCS_ROOT
    docs_root = Path(str(docs_root_raw)).expanduser().resolve()

    log_level = str(_resolve("LOG_LEVEL", file_data, env) or _DEFAULT_LOG_LEVEL).upper()
    try:
        logger.level(log_level)
    except ValueError:
        logger.warning(f"Unknown LOG_LEVEL '{log_level}'. Using {_DEFAULT_LOG_LEVEL}.")
        log_level = _DEFAULT_LOG_LEVEL

    settings = Settings(
        docs_root=docs_root,
        probe_timeout=_resolve_positive_int(
            "PROBE_TIMEOUT", _DEFAULT_PROBE_TIMEOUT, file_data, env
        ),
        timeout_requests=_resolve_positive_int(
            "TIMEOUT_REQUESTS", _DEFAULT_TIMEOUT_REQUESTS, file_data, env
        ),
        crawl_depth=_resolve_positive_int(
            "CRAWL_DEPTH", _DEFAULT_CRAWL_DEPTH, file_data, env
        ),
        log_level=log_level,
    )
    logger.debug(f"Resolved settings: {settings}")
    return settings
