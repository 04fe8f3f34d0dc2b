from .config import Config, load_config, DEFAULT_CONFIG_PATH

__all__ = ["Config", "load_config", "DEFAULT_CONFIG_PATH"]
