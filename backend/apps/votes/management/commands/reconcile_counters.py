"""
Management command to verify denormalized vote counters against the ledger.
"""

from apps.votes.aggregation import reconcile_all, reconcile_event
from core.exceptions import EventNotFoundError
from django.core.management.base import BaseCommand, CommandError


class Command(BaseCommand):
    help = "Recompute vote counters from the vote ledger and report (or repair) drift"

    def add_arguments(self, parser):
        parser.add_argument(
            "event_ids",
            type=int,
            nargs="*",
            help="Events to check (default: all events)",
        )
        parser.add_argument(
            "--repair",
            action="store_true",
            help="Overwrite drifted counters with values recomputed from the ledger",
        )

    def handle(self, *args, **options):
        event_ids = options["event_ids"]
        repair = options["repair"]

        self.stdout.write(self.style.SUCCESS("\n=== Vote Counter Reconciliation ==="))

        try:
            if event_ids:
                reports = [reconcile_event(event_id, repair=repair) for event_id in event_ids]
            else:
                reports = reconcile_all(repair=repair)
        except EventNotFoundError as e:
            raise CommandError(e.message)

        drifted = [report for report in reports if not report.is_consistent]

        for report in reports:
            if report.is_consistent:
                self.stdout.write(self.style.SUCCESS(f"✓ Event {report.event_id}: consistent"))
                continue
            label = "repaired" if report.repaired else "DRIFT"
            self.stdout.write(self.style.WARNING(f"✗ Event {report.event_id}: {label}"))
            for mismatch in report.mismatches:
                self.stdout.write(
                    f"    {mismatch['model']} {mismatch['id']}.{mismatch['field']}: "
                    f"stored={mismatch['stored']} ledger={mismatch['actual']}"
                )

        self.stdout.write(f"\nEvents checked: {len(reports)}, with drift: {len(drifted)}")

        if drifted and not repair:
            raise CommandError(f"{len(drifted)} event(s) have counters that disagree with the ledger")
