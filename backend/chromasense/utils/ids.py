"""
ChromaSense Request IDs
Short sortable ids tagging generations in logs and API responses.
"""
import uuid
from datetime import datetime
from typing import Optional

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


def generate_request_id(prefix: str = "pal", now: Optional[datetime] = None) -> str:
    """
    Build ``<prefix>-<YYYYmmddHHMMSS>-<8 hex chars>``.

    Args:
        prefix: Operation family, e.g. ``gen`` for palette generation
        now: Timestamp to embed; defaults to the current local time
    """
    stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    return f"{prefix}-{stamp}-{uuid.uuid4().hex[:8]}"
