# apps/reactions/services/reconciler.py

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass, asdict
from typing import Dict, Iterable, List, Optional, Set

from django.db import transaction
from django.utils import timezone

from apps.reactions.constants import OP_CREATE, OP_UPDATE, OP_DELETE, batch_size
from apps.reactions.models import Reaction
from apps.reactions.services import queue
from apps.reactions.services.cache import (
    acquire_processing_lock, flush_blog_tags, refresh_counts, release_processing_lock,
)
from apps.reactions.types import PendingOperation, ReactionTarget

logger = logging.getLogger(__name__)


@dataclass
class ReconcileReport:
    blog_id: int
    batches: int = 0
    operations: int = 0
    created: int = 0
    updated: int = 0
    deleted: int = 0
    targets_refreshed: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


# ==========================================================
# Batch helpers
# ==========================================================
def collapse_operations(ops: Iterable[PendingOperation]) -> List[PendingOperation]:
    """
    Keep only the latest operation per (comment, visitor), in FIFO order of that latest entry.
    A visitor has one row per target, so later transitions supersede earlier ones.
    """
    latest: "OrderedDict[tuple, PendingOperation]" = OrderedDict()
    for op in ops:
        latest.pop(op.tuple_key, None)
        latest[op.tuple_key] = op
    return list(latest.values())


def group_by_operation(ops: Iterable[PendingOperation]) -> Dict[str, List[PendingOperation]]:
    grouped: Dict[str, List[PendingOperation]] = {OP_CREATE: [], OP_UPDATE: [], OP_DELETE: []}
    for op in ops:
        grouped[op.operation].append(op)
    return grouped


def _bulk_create(ops: List[PendingOperation]) -> int:
    if not ops:
        return 0
    rows = [
        Reaction(
            blog_id=op.blog_id,
            comment_id=op.comment_id,
            visitor_id=op.visitor_id,
            type=op.type,
        )
        for op in ops
    ]
    # rows already written by the immediate apply hit the unique constraints and are skipped
    Reaction.objects.bulk_create(rows, ignore_conflicts=True)
    return len(rows)


def _bulk_update(ops: List[PendingOperation]) -> int:
    # match keys differ per row, one statement each
    updated = 0
    now = timezone.now()
    for op in ops:
        updated += (
            Reaction.objects.for_visitor(op.target, op.visitor_id)
            .exclude(type=op.type)
            .update(type=op.type, updated_at=now)
        )
    return updated


def _bulk_delete(ops: List[PendingOperation]) -> int:
    deleted = 0
    for op in ops:
        count, _ = Reaction.objects.for_visitor(op.target, op.visitor_id).delete()
        deleted += count
    return deleted


def apply_batch(ops: List[PendingOperation], report: ReconcileReport) -> None:
    """Apply one drained batch in its own transaction."""
    grouped = group_by_operation(collapse_operations(ops))

    with transaction.atomic():
        report.created += _bulk_create(grouped[OP_CREATE])
        report.updated += _bulk_update(grouped[OP_UPDATE])
        report.deleted += _bulk_delete(grouped[OP_DELETE])

    report.batches += 1
    report.operations += len(ops)


# ==========================================================
# Cache refresh
# ==========================================================
def _targets_to_refresh(blog_id: int, touched_comment_ids: Set[Optional[int]]) -> List[ReactionTarget]:
    comment_ids = set(
        Reaction.objects
        .filter(blog_id=blog_id, comment__isnull=False)
        .values_list("comment_id", flat=True)
        .distinct()
    )
    comment_ids |= {cid for cid in touched_comment_ids if cid is not None}

    targets = [ReactionTarget(blog_id)]
    targets += [ReactionTarget(blog_id, cid) for cid in sorted(comment_ids)]
    return targets


def refresh_blog_counts(blog_id: int, touched_comment_ids: Optional[Set[Optional[int]]] = None) -> int:
    """Drop the blog's tagged caches and pre-warm them from the durable store."""
    flush_blog_tags(blog_id)
    return refresh_counts(_targets_to_refresh(blog_id, touched_comment_ids or set()))


# ==========================================================
# Entry point
# ==========================================================
def process_bulk_reaction_updates(blog_id: int) -> Optional[ReconcileReport]:
    """
    Drain the blog's pending queue into the durable store, then rebuild its cached counts.

    Returns None when another run holds the processing lock.
    Batches committed before a failure stay committed and leave the queue;
    the failed batch and the rest stay queued. The lock is always released.
    """
    if not acquire_processing_lock(blog_id):
        logger.info("Bulk reaction update already running for blog %s; skipping", blog_id)
        return None

    report = ReconcileReport(blog_id=blog_id)
    touched: Set[Optional[int]] = set()

    try:
        size = batch_size()
        while True:
            raw_count, ops = queue.peek_batch(blog_id, size)
            if not raw_count:
                break
            touched.update(op.comment_id for op in ops)
            apply_batch(ops, report)
            # only committed batches leave the queue
            queue.ack_batch(blog_id, raw_count)

        report.targets_refreshed = refresh_blog_counts(blog_id, touched)
    finally:
        release_processing_lock(blog_id)

    logger.info(
        "Bulk reaction update for blog %s: %s batch(es), %s op(s), +%s ~%s -%s",
        blog_id, report.batches, report.operations, report.created, report.updated, report.deleted,
    )
    return report
