"""Run the site-records server.

    python records.py --config data/config/server_config.yml --port 8000
"""
from __future__ import annotations
import argparse
from pathlib import Path
from typing import Iterable, Optional

from records_lib.config import load_config, DEFAULT_CONFIG_PATH
from records_lib.logging_config import configure_logging
from records_lib.main import create_app


def get_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Site records server")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML server config")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=8000)
    return p


def main(argv: Optional[Iterable[str]] = None) -> None:
    args = get_parser().parse_args(list(argv) if argv is not None else None)
    config = load_config(args.config)
    configure_logging(config.log_level)
    app = create_app(config)

    import uvicorn
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
