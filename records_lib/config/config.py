"""Server configuration.

Settings come from an optional YAML file (default
`data/config/server_config.yml`) and can be overridden through environment
variables, which is how deployments inject the admin token.
"""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from records_lib.storage import DEFAULT_KEEP_BACKUPS

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("data/config/server_config.yml")

ENV_OVERRIDES = {
    "RECORDS_DATA_DIR": "data_dir",
    "RECORDS_BACKUP_DIR": "backup_dir",
    "RECORDS_ADMIN_TOKEN": "admin_token",
    "RECORDS_LOG_LEVEL": "log_level",
}


@dataclass
class Config:
    data_dir: str = "data"
    # None means `<data_dir>/backups`
    backup_dir: Optional[str] = None
    keep_backups: int = DEFAULT_KEEP_BACKUPS
    # Admin routes reject every request while this is unset.
    admin_token: Optional[str] = None
    log_level: str = "INFO"
    serialized_stores: bool = True
    articles_store: str = "articles"
    subscribers_store: str = "newsletter-subscribers"


def load_config(path: Optional[Path] = None, env: Optional[dict] = None) -> Config:
    """Build a `Config` from YAML plus environment overrides.

    A missing file is not an error; unknown keys in the file are ignored
    with a warning. A file that does not parse raises `yaml.YAMLError`.
    """
    cfg_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    env = os.environ if env is None else env
    values: dict[str, Any] = {}

    if cfg_path.exists():
        with cfg_path.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"{cfg_path} must contain a mapping")
        known = {f.name for f in fields(Config)}
        for key, value in raw.items():
            if key in known:
                values[key] = value
            else:
                logger.warning("Ignoring unknown config key %r in %s", key, cfg_path)
    else:
        logger.debug("No config file at %s; using defaults", cfg_path)

    for var, key in ENV_OVERRIDES.items():
        if env.get(var):
            values[key] = env[var]

    if "keep_backups" in values:
        values["keep_backups"] = int(values["keep_backups"])
    return Config(**values)
