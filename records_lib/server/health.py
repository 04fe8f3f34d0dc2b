"""Server health utilities.

Provides `get_health` returning server status, start time, uptime in
seconds and the record count of every registered store.
"""
from datetime import datetime, timezone
import logging
import time
from typing import Iterable

from records_lib.storage.interfaces import RecordStoreProtocol

logger = logging.getLogger(__name__)

# record process start time at import
_START_TIME = time.time()


def get_health(stores: Iterable[RecordStoreProtocol] = ()) -> dict:
    """Return a dict representing server health.

    Fields:
    - status: 'ok', or 'degraded' when a store cannot be read
    - start_time: ISO 8601 UTC timestamp when the process started
    - uptime_seconds: integer seconds since start
    - stores: mapping of store name to record count (None if unreadable)
    """
    now = time.time()
    uptime = int(now - _START_TIME)
    start_dt = datetime.fromtimestamp(_START_TIME, tz=timezone.utc)

    status = "ok"
    counts = {}
    for store in stores:
        try:
            counts[store.store_name] = len(store.read())
        except Exception:
            logger.exception("Health check could not read store %s", store.store_name)
            counts[store.store_name] = None
            status = "degraded"

    return {
        "status": status,
        "start_time": start_dt.isoformat(),
        "uptime_seconds": uptime,
        "stores": counts,
    }
