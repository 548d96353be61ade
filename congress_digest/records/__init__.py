"""
Records module for the digest service.

Fetches the daily Congressional Record feed from congress.gov and stores
issues not seen before.
"""

from congress_digest.records.client import CongressRecordClient, with_api_key
from congress_digest.records.refresh import RecordFeed, refresh_records

__all__ = ["CongressRecordClient", "RecordFeed", "refresh_records", "with_api_key"]
