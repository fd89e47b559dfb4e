# apps/reactions/services/queue.py

from __future__ import annotations

import json
import logging
import time
from typing import Iterator, List, Optional, Tuple

from apps.reactions.constants import queue_retention, queue_ttl
from apps.reactions.types import PendingOperation
from services.redis_connection import get_redis_connection

logger = logging.getLogger(__name__)

QUEUE_KEY_PREFIX = "reaction_queue:blog_"


def queue_key(blog_id: int) -> str:
    return f"{QUEUE_KEY_PREFIX}{blog_id}"


def blog_id_from_key(key: str) -> Optional[int]:
    try:
        return int(key[len(QUEUE_KEY_PREFIX):])
    except (TypeError, ValueError):
        return None


def _decode(raw: str) -> Optional[PendingOperation]:
    try:
        return PendingOperation.from_json(raw)
    except (ValueError, KeyError, TypeError):
        logger.warning("Dropping unreadable pending reaction entry: %r", raw)
        return None


# Append ------------------------------------------------------
def push(op: PendingOperation) -> None:
    """Append to the tail of the blog's queue and extend its TTL."""
    r = get_redis_connection()
    key = queue_key(op.blog_id)
    pipe = r.pipeline()
    pipe.rpush(key, op.to_json())
    pipe.expire(key, queue_ttl())
    pipe.execute()


# Drain -------------------------------------------------------
def peek_batch(blog_id: int, size: int) -> Tuple[int, List[PendingOperation]]:
    """
    Read up to `size` entries from the head (oldest first) without removing them.
    Returns (raw entry count, decoded operations); pair with `ack_batch` once applied.
    """
    r = get_redis_connection()
    raw_items = r.lrange(queue_key(blog_id), 0, size - 1)
    ops = []
    for raw in raw_items:
        op = _decode(raw)
        if op is not None:
            ops.append(op)
    return len(raw_items), ops


def ack_batch(blog_id: int, count: int) -> None:
    """Pop `count` entries from the head; new entries only ever land on the tail."""
    if count > 0:
        get_redis_connection().ltrim(queue_key(blog_id), count, -1)


# Read --------------------------------------------------------
def read_all(blog_id: int) -> List[PendingOperation]:
    r = get_redis_connection()
    ops = []
    for raw in r.lrange(queue_key(blog_id), 0, -1):
        op = _decode(raw)
        if op is not None:
            ops.append(op)
    return ops


def queue_length(blog_id: int) -> int:
    return int(get_redis_connection().llen(queue_key(blog_id)))


def iter_queue_keys() -> Iterator[str]:
    # SCAN instead of KEYS to avoid blocking Redis
    yield from get_redis_connection().scan_iter(match=f"{QUEUE_KEY_PREFIX}*")


def iter_queued_blog_ids() -> Iterator[int]:
    for key in iter_queue_keys():
        blog_id = blog_id_from_key(key)
        if blog_id is not None:
            yield blog_id


# Cleanup -----------------------------------------------------
def cleanup_old_queues(now: Optional[float] = None) -> int:
    """
    Rewrite every pending queue keeping only entries younger than the retention window.
    Returns the number of dropped entries.
    """
    r = get_redis_connection()
    now = time.time() if now is None else now
    retention = queue_retention()
    dropped = 0

    for key in list(iter_queue_keys()):
        items = r.lrange(key, 0, -1)
        valid_items = []

        for raw in items:
            try:
                ts = int(json.loads(raw).get("timestamp") or 0)
            except (ValueError, TypeError, AttributeError):
                logger.warning("Dropping unreadable pending reaction entry in %s", key)
                continue
            if now - ts < retention:
                valid_items.append(raw)

        removed = len(items) - len(valid_items)
        if not removed:
            continue

        # Replace the queue with only valid items, keeping their order
        pipe = r.pipeline()
        pipe.delete(key)
        if valid_items:
            pipe.rpush(key, *valid_items)
            pipe.expire(key, queue_ttl())
        pipe.execute()

        dropped += removed
        logger.info("Dropped %s stale pending reaction(s) from %s", removed, key)

    return dropped
