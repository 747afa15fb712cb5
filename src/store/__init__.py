"""Record store access layer.

This module opens per-run SQLite genome and feature stores read-only,
caches their connections with idle leases, and decodes stored rows.
"""
