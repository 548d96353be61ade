"""
HTTP API for the digest service.

Exposes summarization (streamed as NDJSON or returned whole), the stored
record listing and search, and a health check.
"""
