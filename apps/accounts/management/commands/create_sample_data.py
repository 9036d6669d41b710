"""
Management command to create sample data for trying out the API.

Usage:
    python manage.py create_sample_data [--clear]

This creates:
- 1 staff user (admin)
- 2 delivery agents (ada, ben) with verified payout accounts
- Orders for vendors, a late-night vendor and a cafeteria
- Settled charges for some orders, so agent wallets hold money
"""

from django.core.management.base import BaseCommand
from django.db import transaction
from decimal import Decimal

from apps.accounts.models import User, DeliveryAgent
from apps.orders.models import Order, SellerType
from apps.orders.services import process_charge_success
from apps.payouts.models import PayoutProfile, Withdrawal
from apps.wallets.models import Wallet, WalletTransaction


class Command(BaseCommand):
    help = 'Create sample data for testing the API'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data before creating new sample data',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self.clear_data()

        self.stdout.write('Creating sample data...')

        users = self.create_users()
        agents = self.create_agents(users)
        self.create_payout_profiles(agents)
        orders = self.create_orders(agents)
        self.settle_orders(orders)

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write('')
        self.stdout.write('Test accounts:')
        self.stdout.write('  admin@example.com / admin123 (staff)')
        self.stdout.write('  ada@example.com / password123 (agent)')
        self.stdout.write('  ben@example.com / password123 (agent)')
        for name, agent in agents.items():
            self.stdout.write(f'  agent {name}: {agent.id}')

    def clear_data(self):
        """Clear all sample data from the database."""
        WalletTransaction.objects.all().delete()
        Withdrawal.objects.all().delete()
        Wallet.objects.all().delete()
        Order.objects.all().delete()
        PayoutProfile.objects.all().delete()
        DeliveryAgent.objects.all().delete()
        User.objects.filter(is_superuser=False).delete()

    def create_users(self):
        """Create the staff user and agent users."""
        users = {}

        admin, created = User.objects.get_or_create(
            email='admin@example.com',
            defaults={
                'full_name': 'Admin',
                'is_staff': True,
                'is_superuser': True,
            }
        )
        if created:
            admin.set_password('admin123')
            admin.save()
        users['admin'] = admin

        for name, full_name, phone in [
            ('ada', 'Ada Obi', '+2348010000001'),
            ('ben', 'Ben Musa', '+2348010000002'),
        ]:
            user, created = User.objects.get_or_create(
                email=f'{name}@example.com',
                defaults={'full_name': full_name, 'phone': phone}
            )
            if created:
                user.set_password('password123')
                user.save()
            users[name] = user

        self.stdout.write(f'  Created {len(users)} users')
        return users

    def create_agents(self, users):
        agents = {}
        for name in ('ada', 'ben'):
            agent, _ = DeliveryAgent.objects.get_or_create(user=users[name])
            agents[name] = agent
        self.stdout.write(f'  Created {len(agents)} delivery agents')
        return agents

    def create_payout_profiles(self, agents):
        accounts = {
            'ada': ('0123456789', '044', 'Access Bank', 'ADA OBI'),
            'ben': ('9876543210', '058', 'Guaranty Trust Bank', 'BEN MUSA'),
        }
        for name, (account_number, bank_code, bank_name, account_name) in accounts.items():
            PayoutProfile.objects.update_or_create(
                user=agents[name].user,
                defaults={
                    'account_number': account_number,
                    'bank_code': bank_code,
                    'bank_name': bank_name,
                    'account_name': account_name,
                    'verified': True,
                }
            )
        self.stdout.write(f'  Created {len(accounts)} payout profiles')

    def create_orders(self, agents):
        """Create unpaid orders. Returns (order, settle) pairs."""
        orders_data = [
            ('ORD-0001', 'ref_sample_0001', Decimal('5000.00'), SellerType.VENDOR, 'ada', True),
            ('ORD-0002', 'ref_sample_0002', Decimal('2450.00'), SellerType.LATE_NIGHT_VENDOR, 'ada', True),
            ('ORD-0003', 'ref_sample_0003', Decimal('1800.00'), SellerType.VENDOR, 'ben', True),
            ('ORD-0004', 'ref_sample_0004', Decimal('1200.00'), SellerType.CAFETERIA, 'ben', True),
            ('ORD-0005', 'ref_sample_0005', Decimal('3100.00'), SellerType.VENDOR, 'ben', False),
        ]

        orders = []
        for number, reference, total, seller_type, agent_name, settle in orders_data:
            order, _ = Order.objects.get_or_create(
                order_number=number,
                defaults={
                    'payment_reference': reference,
                    'total': total,
                    'seller_id': f'{seller_type}-1',
                    'seller_type': seller_type,
                    'delivery_agent': agents[agent_name],
                }
            )
            orders.append((order, settle))

        self.stdout.write(f'  Created {len(orders)} orders')
        return orders

    def settle_orders(self, orders):
        """Run charge.success settlement for the orders marked to settle."""
        settled = 0
        for order, settle in orders:
            if not settle:
                continue
            result = process_charge_success(
                reference=order.payment_reference,
                amount=int(order.total * 100),
            )
            if result['outcome'] == 'processed':
                settled += 1
        self.stdout.write(f'  Settled {settled} order payments')
