from decimal import Decimal
import uuid

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('accounts', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Wallet',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('wallet_type', models.CharField(choices=[('food_wallet', 'Food wallet'), ('earnings_wallet', 'Earnings wallet')], max_length=20)),
                ('balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('agent', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='wallets', to='accounts.deliveryagent')),
            ],
            options={
                'db_table': 'wallets',
                'ordering': ['agent', 'wallet_type'],
                'constraints': [
                    models.UniqueConstraint(fields=('agent', 'wallet_type'), name='uniq_wallet_per_agent_type'),
                    models.CheckConstraint(condition=models.Q(('balance__gte', 0)), name='wallet_balance_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='WalletTransaction',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('wallet_type', models.CharField(choices=[('food_wallet', 'Food wallet'), ('earnings_wallet', 'Earnings wallet')], max_length=20)),
                ('transaction_type', models.CharField(choices=[('credit', 'Credit'), ('withdrawal', 'Withdrawal')], max_length=20)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('balance_before', models.DecimalField(decimal_places=2, max_digits=12)),
                ('balance_after', models.DecimalField(decimal_places=2, max_digits=12)),
                ('reference_type', models.CharField(choices=[('order', 'Order'), ('withdrawal', 'Withdrawal')], max_length=20)),
                ('reference_id', models.CharField(max_length=64)),
                ('description', models.CharField(blank=True, max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('agent', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='wallet_transactions', to='accounts.deliveryagent')),
                ('wallet', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to='wallets.wallet')),
            ],
            options={
                'db_table': 'wallet_transactions',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['reference_type', 'reference_id'], name='wallet_txn_reference_idx'),
                    models.Index(fields=['agent', 'created_at'], name='wallet_txn_agent_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('wallet', 'transaction_type', 'reference_type', 'reference_id'), name='uniq_wallet_txn_reference'),
                ],
            },
        ),
    ]
