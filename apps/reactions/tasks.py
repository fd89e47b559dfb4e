# apps/reactions/tasks.py
import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task
def process_bulk_reaction_updates(blog_id):
    """Deferred reconciliation for one blog. Idempotent; safe on an empty queue."""
    from apps.reactions.services.reconciler import process_bulk_reaction_updates as reconcile

    report = reconcile(int(blog_id))
    if report is None:
        return f"blog {blog_id}: already processing"
    return report.as_dict()


@shared_task
def cleanup_old_reaction_queues():
    from apps.reactions.services.queue import cleanup_old_queues

    dropped = cleanup_old_queues()
    return f"{dropped} stale pending reaction(s) dropped."
