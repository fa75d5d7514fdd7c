"""Management command to generate invoices from due recurring templates."""
from datetime import date

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from apps.recurring.models import RecurringInvoice
from apps.recurring.scheduler import is_due
from apps.recurring.tasks import generate_due_recurring_invoices


class Command(BaseCommand):
    help = "Generate invoices for all due recurring invoice templates"

    def add_arguments(self, parser):
        parser.add_argument(
            "--date",
            type=str,
            help="Run as if today were this ISO date (default: today)",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="List due templates without generating invoices",
        )

    def handle(self, *args, **options):
        run_date = options["date"]
        if run_date:
            try:
                date.fromisoformat(run_date)
            except ValueError as err:
                raise CommandError(f"Invalid date: {run_date}") from err

        if options["dry_run"]:
            today = date.fromisoformat(run_date) if run_date else timezone.localdate()
            templates = RecurringInvoice.objects.filter(
                is_active=True, next_invoice_date__lte=today
            ).select_related("user")
            due = [t for t in templates if is_due(t, today)]
            for template in due:
                self.stdout.write(
                    f"  {template.user.email}: {template} (next {template.next_invoice_date})"
                )
            self.stdout.write(f"{len(due)} template(s) due on {today.isoformat()}")
            return

        result = generate_due_recurring_invoices(run_date)
        self.stdout.write(
            self.style.SUCCESS(f"Generated {result['generated']} invoice(s) for {result['date']}")
        )
        if result["failed"]:
            self.stdout.write(self.style.WARNING(f"{result['failed']} template(s) failed, see logs"))
