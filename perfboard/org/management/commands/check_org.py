from __future__ import annotations

from django.core.management.base import BaseCommand
from django.core.management.base import CommandError
from django.core.management.base import CommandParser

from perfboard.assignments.services import check_targets
from perfboard.org.accessors import load_departments
from perfboard.org.exceptions import StructureError
from perfboard.org.services import sync_employee_counts
from perfboard.org.tree import validate_hierarchy


class Command(BaseCommand):
    help = "Check the department tree and assignments for structural errors"

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--sync-counts",
            action="store_true",
            dest="sync_counts",
            help="Also recompute each department's employee_count",
        )

    def handle(self, *args, **options) -> None:
        try:
            validate_hierarchy(load_departments())
            check_targets()
        except StructureError as exc:
            raise CommandError(str(exc)) from exc
        self.stdout.write(self.style.SUCCESS("Organisation structure is consistent"))

        if options.get("sync_counts"):
            changed = sync_employee_counts()
            self.stdout.write(f"Employee counts updated for {changed} department(s)")
