from django.core.management.base import BaseCommand

from apps.reactions.services.queue import cleanup_old_queues, iter_queued_blog_ids
from apps.reactions.services.reconciler import process_bulk_reaction_updates


class Command(BaseCommand):
    help = "Reconcile pending reactions into the database and refresh cached counts."

    def add_arguments(self, parser):
        parser.add_argument(
            "--blog",
            type=int,
            action="append",
            dest="blogs",
            help="Blog id to reconcile (repeatable). Defaults to every blog with a pending queue.",
        )
        parser.add_argument(
            "--cleanup",
            action="store_true",
            help="Drop stale pending entries before reconciling.",
        )

    def handle(self, *args, **options):
        if options.get("cleanup"):
            dropped = cleanup_old_queues()
            self.stdout.write(self.style.WARNING(f"{dropped} stale pending reaction(s) dropped."))

        blog_ids = options.get("blogs") or sorted(set(iter_queued_blog_ids()))
        if not blog_ids:
            self.stdout.write("No pending reaction queues.")
            return

        for blog_id in blog_ids:
            report = process_bulk_reaction_updates(blog_id)
            if report is None:
                self.stdout.write(self.style.WARNING(f"Blog {blog_id}: already processing, skipped."))
                continue
            self.stdout.write(self.style.SUCCESS(
                f"Blog {blog_id}: {report.batches} batch(es), {report.operations} op(s), "
                f"{report.targets_refreshed} target(s) refreshed."
            ))
