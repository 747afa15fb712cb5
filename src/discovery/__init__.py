"""Run directory discovery layer.

This module finds ULID-named run folders under a root directory and
groups them into time buckets for summary views.
"""
