# apps/reactions/services/cache.py

from __future__ import annotations

import logging
from typing import Iterable, Optional

from django.core.cache import cache
from django.db.models import Count

from apps.reactions.constants import cache_ttl, bulk_update_delay, processing_lock_ttl
from apps.reactions.models import Reaction
from apps.reactions.types import ReactionCounts, ReactionTarget

logger = logging.getLogger(__name__)


def _tags_key(blog_id: int) -> str:
    return f"cache_tags:blog_{blog_id}"


def _scheduled_key(blog_id: int) -> str:
    return f"bulk_update_scheduled:blog_{blog_id}"


def _processing_key(blog_id: int) -> str:
    return f"bulk_processing:blog_{blog_id}"


# ==========================================================
# Durable aggregate
# ==========================================================
def count_by_type(target: ReactionTarget) -> ReactionCounts:
    rows = (
        Reaction.objects.for_target(target)
        .values("type")
        .annotate(count=Count("id"))
        .order_by()
    )
    return ReactionCounts.from_rows(rows)


# ==========================================================
# Blog tags
# ==========================================================
def _tag_key_for_blog(blog_id: int, key: str) -> None:
    # Django cache has no tags; keep the key set per blog in the cache itself
    tags_key = _tags_key(blog_id)
    keys = cache.get(tags_key) or []
    if key not in keys:
        keys.append(key)
    # re-set on every write so the list never expires before the keys it tracks
    cache.set(tags_key, keys, cache_ttl())


def flush_blog_tags(blog_id: int) -> int:
    """Drop every cached key registered for the blog. Returns how many keys were dropped."""
    tags_key = _tags_key(blog_id)
    keys = cache.get(tags_key) or []
    if keys:
        cache.delete_many(keys)
    cache.delete(tags_key)
    return len(keys)


# ==========================================================
# Counts cache
# ==========================================================
def get_cached_counts(target: ReactionTarget) -> ReactionCounts:
    """
    Read-through: a miss falls back to the durable store and warms the cache.
    """
    cached = cache.get(target.counts_key)
    if cached is not None:
        return ReactionCounts.from_dict(cached)

    counts = count_by_type(target)
    put_counts(target, counts)
    return counts


def put_counts(target: ReactionTarget, counts: ReactionCounts) -> None:
    cache.set(target.counts_key, counts.to_dict(), cache_ttl())
    _tag_key_for_blog(target.blog_id, target.counts_key)


def has_counts(target: ReactionTarget) -> bool:
    return cache.get(target.counts_key) is not None


def peek_counts(target: ReactionTarget) -> Optional[ReactionCounts]:
    """Cached counts without the read-through; None on a miss."""
    cached = cache.get(target.counts_key)
    if cached is None:
        return None
    return ReactionCounts.from_dict(cached)


def forget_counts(target: ReactionTarget) -> None:
    cache.delete(target.counts_key)


def refresh_counts(targets: Iterable[ReactionTarget]) -> int:
    """Overwrite cached counts from the durable store."""
    refreshed = 0
    for target in targets:
        put_counts(target, count_by_type(target))
        refreshed += 1
    return refreshed


# ==========================================================
# Advisory flags
# ==========================================================
def mark_bulk_update_scheduled(blog_id: int) -> bool:
    """
    Set the "bulk update scheduled" flag.
    True only for the caller that set it; the flag expires with the reconciliation delay.
    """
    return bool(cache.add(_scheduled_key(blog_id), 1, bulk_update_delay()))


def is_bulk_update_scheduled(blog_id: int) -> bool:
    return cache.get(_scheduled_key(blog_id)) is not None


def acquire_processing_lock(blog_id: int) -> bool:
    return bool(cache.add(_processing_key(blog_id), 1, processing_lock_ttl()))


def release_processing_lock(blog_id: int) -> None:
    cache.delete(_processing_key(blog_id))
