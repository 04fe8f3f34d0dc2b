from __future__ import annotations
import logging
from pathlib import Path
import yaml
from typing import Optional


def configure_logging(level: Optional[str] = None, config_path: Optional[Path] = None) -> logging.Logger:
    """Configure root logging for the application.

    An explicit `level` wins; otherwise `log_level` is read from the YAML
    server config. Returns a module logger for the caller.
    """
    default_level = logging.INFO

    if level is None:
        cfg_path = config_path or Path('data/config/server_config.yml')
        if cfg_path.exists():
            try:
                with cfg_path.open('r', encoding='utf-8') as _f:
                    _cfg = yaml.safe_load(_f) or {}
                    level = _cfg.get('log_level') if isinstance(_cfg, dict) else None
            except (OSError, yaml.YAMLError):
                # If config parse fails, fall back to default level
                level = None

    if level:
        resolved = logging.getLevelName(str(level).upper())
        if isinstance(resolved, int):
            default_level = resolved

    # Reconfigure root handlers to use the selected level and format
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(level=default_level, format='%(asctime)s %(levelname)s [%(name)s]: %(message)s')
    logger = logging.getLogger(__name__)

    # Keep known noisy libraries quiet by default
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logger.info("Log level set to %s", logging.getLevelName(default_level))

    return logger
