# apps/reactions/services/coordinator.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from django.db import DatabaseError, IntegrityError, transaction
from redis.exceptions import RedisError

from apps.reactions.constants import (
    REMOVE, OP_CREATE, OP_UPDATE, OP_DELETE, OP_NONE, bulk_update_delay,
)
from apps.reactions.exceptions import ReactionProcessingError
from apps.reactions.models import Reaction
from apps.reactions.services import queue
from apps.reactions.services.broadcast import broadcast_reaction_update
from apps.reactions.services.cache import (
    count_by_type, get_cached_counts, mark_bulk_update_scheduled, peek_counts, put_counts,
)
from apps.reactions.tasks import process_bulk_reaction_updates
from apps.reactions.types import PendingOperation, ReactionCounts, ReactionTarget

logger = logging.getLogger(__name__)


@dataclass
class ReactionResult:
    message: str
    reaction: Optional[Reaction]
    operation: str
    counts: ReactionCounts
    previous_type: Optional[str] = None


@dataclass
class _Applied:
    message: str
    reaction: Optional[Reaction]
    operation: str
    pending: Optional[PendingOperation] = None
    previous_type: Optional[str] = None


# ==========================================================
# Immediate apply (one transaction)
# ==========================================================
def _pending(target: ReactionTarget, visitor_id: str, reaction_type: str, operation: str, previous_type=None):
    return PendingOperation(
        blog_id=target.blog_id,
        comment_id=target.comment_id,
        visitor_id=visitor_id,
        type=reaction_type,
        operation=operation,
        previous_type=previous_type,
    )


def _apply_immediate(target: ReactionTarget, visitor_id: str, requested_type: str) -> _Applied:
    """
    Write the visitor's transition to the durable store and queue it.
    The queue push runs inside the transaction so a Redis failure rolls the row change back.
    """
    with transaction.atomic():
        existing = Reaction.objects.for_visitor(target, visitor_id).select_for_update().first()

        if requested_type == REMOVE:
            if existing is None:
                return _Applied("No reaction to remove", None, OP_NONE)

            deleted_id = existing.pk
            existing.delete()
            existing.pk = deleted_id
            applied = _Applied(
                "Reaction deleted successfully",
                existing,
                OP_DELETE,
                pending=_pending(target, visitor_id, existing.type, OP_DELETE),
            )

        elif existing is not None:
            if existing.type == requested_type:
                return _Applied("Reaction unchanged", existing, OP_NONE)

            previous_type = existing.type
            existing.type = requested_type
            existing.save(update_fields=["type", "updated_at"])
            applied = _Applied(
                "Reaction updated successfully",
                existing,
                OP_UPDATE,
                pending=_pending(target, visitor_id, requested_type, OP_UPDATE, previous_type),
                previous_type=previous_type,
            )

        else:
            reaction = Reaction.objects.create(
                blog_id=target.blog_id,
                comment_id=target.comment_id,
                visitor_id=visitor_id,
                type=requested_type,
            )
            applied = _Applied(
                "Reaction created successfully",
                reaction,
                OP_CREATE,
                pending=_pending(target, visitor_id, requested_type, OP_CREATE),
            )

        queue.push(applied.pending)
        return applied


# ==========================================================
# Cache
# ==========================================================
def apply_to_cached_counts(target: ReactionTarget, op: PendingOperation) -> ReactionCounts:
    """
    Reflect one committed operation in the cached aggregate.
    On a miss the durable store already holds the change, so recompute instead of applying a delta.
    """
    counts = peek_counts(target)
    if counts is None:
        counts = count_by_type(target)
    elif op.operation == OP_CREATE:
        counts = counts.incremented(op.type)
    elif op.operation == OP_DELETE:
        counts = counts.decremented(op.type)
    elif op.operation == OP_UPDATE:
        counts = counts.decremented(op.previous_type).incremented(op.type)

    put_counts(target, counts)
    return counts


def _current_counts(target: ReactionTarget) -> ReactionCounts:
    try:
        return get_cached_counts(target)
    except Exception:
        logger.exception("Cached counts unavailable for %s", target)
        return count_by_type(target)


# ==========================================================
# Scheduling
# ==========================================================
def schedule_bulk_update(blog_id: int) -> bool:
    """
    Arrange one deferred reconciliation per delay window.
    Returns False when a run is already scheduled for the blog.
    """
    try:
        first = mark_bulk_update_scheduled(blog_id)
    except Exception:
        # no flag means no de-dup; the processing lock still keeps runs serial
        logger.exception("Scheduled flag unavailable for blog %s; dispatching anyway", blog_id)
        first = True

    if not first:
        return False

    try:
        process_bulk_reaction_updates.apply_async(args=[blog_id], countdown=bulk_update_delay())
    except Exception:
        # best-effort: the flag expires and the next submission schedules again
        logger.exception("Failed to schedule bulk reaction update for blog %s", blog_id)
    return True


# ==========================================================
# Entry point
# ==========================================================
def submit_reaction(target: ReactionTarget, visitor_id: str, requested_type: str) -> ReactionResult:
    """
    Apply a visitor's reaction on a target.

    Flow:
      1) durable write + queue push (atomic)
      2) cached aggregate updated in place
      3) reconciliation scheduled (de-duplicated by the scheduled flag)
      4) other viewers notified over the target's group

    Raises ReactionProcessingError when step 1 fails; nothing is changed in that case.
    Once step 1 commits the reaction stands: a cache outage in steps 2-3 falls back to
    counts from the store and still dispatches the reconciliation.
    """
    try:
        try:
            applied = _apply_immediate(target, visitor_id, requested_type)
        except IntegrityError:
            # concurrent create for the same visitor won; the row exists now
            logger.info("Reaction create conflict for %s on %s, retrying", visitor_id, target)
            applied = _apply_immediate(target, visitor_id, requested_type)
    except (DatabaseError, RedisError) as exc:
        logger.error("Reaction error for %s on %s: %s", visitor_id, target, exc, exc_info=True)
        raise ReactionProcessingError() from exc

    if applied.operation == OP_NONE:
        return ReactionResult(
            message=applied.message,
            reaction=applied.reaction,
            operation=applied.operation,
            counts=_current_counts(target),
        )

    try:
        counts = apply_to_cached_counts(target, applied.pending)
    except Exception:
        # row and queue entry are committed; answer from the store, reconciliation rewarms the cache
        logger.exception("Cached counts not updated for %s", target)
        counts = count_by_type(target)
    schedule_bulk_update(target.blog_id)
    broadcast_reaction_update(target, counts, visitor_id)

    return ReactionResult(
        message=applied.message,
        reaction=applied.reaction,
        operation=applied.operation,
        counts=counts,
        previous_type=applied.previous_type,
    )
