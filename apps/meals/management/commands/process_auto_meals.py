"""
Management command to add automatic meals.

Adds the subscribed meals of every group with auto meals enabled. Meant
to run once a day from cron or a scheduler.

Usage:
    python manage.py process_auto_meals
    python manage.py process_auto_meals --date 2026-10-24
"""

from datetime import date

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from apps.meals.services import process_auto_meals_for_all_groups


class Command(BaseCommand):
    help = 'Add automatic meals for every group with auto meals enabled'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            help='Day to process (YYYY-MM-DD), defaults to today',
        )

    def handle(self, *args, **options):
        if options['date']:
            try:
                day = date.fromisoformat(options['date'])
            except ValueError:
                raise CommandError(f"Invalid date '{options['date']}', expected YYYY-MM-DD")
        else:
            day = timezone.localdate()

        results = process_auto_meals_for_all_groups(day=day)

        if not results:
            self.stdout.write(self.style.WARNING(f'No groups processed for {day}.'))
            return

        for group_id, result in results.items():
            self.stdout.write(
                f"  - {group_id}: {result['processed']} meal(s) added, "
                f"{result['skipped']} of {result['total_users']} member(s) skipped"
            )

        self.stdout.write(
            self.style.SUCCESS(f'\nProcessed auto meals of {len(results)} group(s) for {day}.')
        )
