"""Bucketing of canonical items into window summaries."""

from __future__ import annotations

from .buckets import Bucket, bucket_counts, empty_groups
from .classify import (
    ItemKind,
    classify_item,
    group_items,
    group_summary,
    item_kind,
    parse_usernames,
)

__all__ = [
    "Bucket",
    "ItemKind",
    "bucket_counts",
    "classify_item",
    "empty_groups",
    "group_items",
    "group_summary",
    "item_kind",
    "parse_usernames",
]
