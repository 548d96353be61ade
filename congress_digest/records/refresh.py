"""Pull the congress.gov feed into the record store."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Protocol

from congress_digest.storage import FeedRecord, RecordStore

logger = logging.getLogger(__name__)


class RecordFeed(Protocol):
    async def fetch_records(self) -> List[FeedRecord]: ...


async def refresh_records(store: RecordStore, feed: RecordFeed) -> Dict[str, int]:
    """Fetch the current feed and store issues not seen before.

    Returns:
        Counts of fetched, inserted and already stored records
    """
    records = await feed.fetch_records()
    result = await asyncio.to_thread(store.store_new, records)
    counts = {"fetched": len(records), "inserted": result.inserted, "existing": result.existing}
    logger.info("Record refresh complete", extra=counts)
    return counts
