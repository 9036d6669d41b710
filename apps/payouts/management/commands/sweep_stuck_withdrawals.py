"""
Management command to fail withdrawals stuck in the pending state.

A withdrawal stays pending only between its reservation and the gateway
call; one still pending long after that was abandoned by a crashed
process. Run periodically (e.g. from cron).

Usage:
    python manage.py sweep_stuck_withdrawals
    python manage.py sweep_stuck_withdrawals --minutes 60 --dry-run
"""

from django.core.management.base import BaseCommand
from django.conf import settings
from apps.payouts.services import find_stuck_withdrawals, sweep_stuck_withdrawals


class Command(BaseCommand):
    help = 'Mark withdrawals stuck in pending as failed'

    def add_arguments(self, parser):
        parser.add_argument(
            '--minutes',
            type=int,
            default=None,
            help=f'Age in minutes after which a pending withdrawal is stuck, never less than PAYSTACK_TIMEOUT '
                 f'(default: STUCK_WITHDRAWAL_MINUTES = {settings.STUCK_WITHDRAWAL_MINUTES})',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be updated without making changes',
        )

    def handle(self, *args, **options):
        minutes = options['minutes']
        dry_run = options['dry_run']

        stuck = list(find_stuck_withdrawals(older_than_minutes=minutes).select_related('agent__user'))

        if not stuck:
            self.stdout.write(
                self.style.SUCCESS('No stuck withdrawals found.')
            )
            return

        self.stdout.write(f'\nFound {len(stuck)} stuck withdrawal(s):\n')
        for withdrawal in stuck:
            self.stdout.write(
                f'  - {withdrawal.reference} | {withdrawal.amount} | '
                f'Agent: {withdrawal.agent.user.email} | Created: {withdrawal.created_at}'
            )

        if dry_run:
            self.stdout.write(
                self.style.WARNING('\n--dry-run mode: No changes made.')
            )
            return

        failed = sweep_stuck_withdrawals(older_than_minutes=minutes)

        self.stdout.write(
            self.style.SUCCESS(f'\nMarked {len(failed)} withdrawal(s) as failed.')
        )
