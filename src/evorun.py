"""Public SDK surface for the evorun browser.

This module provides a stable import path for SDK users.
It re-exports the client, the store cache and the discovery functions.
"""

from __future__ import annotations

from core.config import EvorunConfig
from core.run_types import RunDirectory, RunSummary, RunSummaryEntry
from discovery.run_scanner import discover
from discovery.run_summary import summarize
from discovery.ulid_codec import decode_timestamp
from store.browser_sdk import EvorunClient
from store.connection_cache import RecordStoreCache
from store.record_decoder import (
    DecodedValue,
    DecodeFailure,
    DecodeResult,
    WrappedBuffer,
    decode_record,
    decode_record_value,
)
from store.run_record_stores import RunRecordStores

__all__ = [
    "DecodeFailure",
    "DecodeResult",
    "DecodedValue",
    "EvorunClient",
    "EvorunConfig",
    "RecordStoreCache",
    "RunDirectory",
    "RunRecordStores",
    "RunSummary",
    "RunSummaryEntry",
    "WrappedBuffer",
    "decode_record",
    "decode_record_value",
    "decode_timestamp",
    "discover",
    "summarize",
]
