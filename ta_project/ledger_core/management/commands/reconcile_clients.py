import json

from django.core.management.base import BaseCommand, CommandError

from ledger_core.models import Company
from ledger_core.services.reconciliation import ReconciliationChecker


class Command(BaseCommand):
    help = (
        "Compare stored client due amounts with the ledger. "
        "Prints a report; --apply writes corrections."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--company",
            type=str,
            default=None,
            help="Slug of the company to check (default: every company)",
        )
        parser.add_argument(
            "--apply",
            action="store_true",
            help="Write corrected due amounts back instead of only reporting",
        )

    def handle(self, *args, **options):
        companies = Company.objects.order_by("id")
        if options["company"]:
            companies = companies.filter(slug=options["company"])
            if not companies.exists():
                raise CommandError(f"Company '{options['company']}' not found")

        for company in companies:
            checker = ReconciliationChecker(company)
            if options["apply"]:
                summary = checker.reconcile()
                self.stdout.write(self.style.SUCCESS(
                    f"{company.slug}: {summary['reconciled_clients']}/"
                    f"{summary['total_clients']} clients corrected "
                    f"(total difference {summary['total_difference']})"
                ))
                for error in summary["errors"]:
                    self.stdout.write(self.style.ERROR(error))
            else:
                report = checker.report()
                self.stdout.write(self.style.NOTICE(
                    f"{company.slug}: {report['drifting_clients']}/"
                    f"{report['total_clients']} clients drifting"
                ))
                drifting = [d for d in report["details"] if d["is_drifting"]]
                if drifting:
                    self.stdout.write(json.dumps(drifting, indent=2))
