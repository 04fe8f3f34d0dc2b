#!/usr/bin/env python3
"""Inspect and restore record store backups.

Usage: python3 scripts/backups.py STORE [--list] [--restore [BACKUP]] [--prune]

STORE is the store name (e.g. `articles`). Paths come from the server
config (`--config`, default `data/config/server_config.yml`).
"""
import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from records_lib.config import load_config, DEFAULT_CONFIG_PATH  # noqa: E402
from records_lib.storage import RecordStore  # noqa: E402


def main(argv=None):
    p = argparse.ArgumentParser()
    p.add_argument('store')
    p.add_argument('--config', type=Path, default=DEFAULT_CONFIG_PATH)
    p.add_argument('--list', action='store_true')
    p.add_argument('--restore', nargs='?', const='', default=None, metavar='BACKUP',
                   help='Restore BACKUP, or the newest backup when omitted')
    p.add_argument('--prune', action='store_true', help='Delete backups beyond keep_backups')
    args = p.parse_args(argv)

    cfg = load_config(args.config)
    store = RecordStore(args.store, data_dir=cfg.data_dir, backup_dir=cfg.backup_dir, keep_backups=cfg.keep_backups)

    if args.restore is not None:
        try:
            records = store.restore_backup(args.restore or None)
        except FileNotFoundError as e:
            print(e)
            return 1
        print(f"Restored {len(records)} record(s) into {store.file_path}")
        return 0

    if args.prune:
        for path in store.cleanup_backups():
            print(f"Deleted {path.name}")
        return 0

    backups = store.backups.list_backups()
    if not backups:
        print(f"No backups for {args.store}")
    for path in backups:
        print(path.name)
    return 0


if __name__ == '__main__':
    sys.exit(main())
