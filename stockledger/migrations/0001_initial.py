"""
Initial migration for Stockledger models.
"""

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Stockledger models: Department, Product, LedgerEntry, StockAlert."""

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Department',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.SlugField(unique=True, verbose_name='Code')),
                ('name', models.CharField(max_length=100, verbose_name='Name')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name': 'Department',
                'verbose_name_plural': 'Departments',
                'db_table': 'departments',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('sku', models.CharField(max_length=64, unique=True, verbose_name='SKU')),
                ('quantity_in_stock', models.PositiveIntegerField(default=0, verbose_name='Quantity in stock')),
                ('minimum_stock_level', models.PositiveIntegerField(default=0, help_text='Alert when stock is at or below this level. 0 disables alerts.', verbose_name='Minimum stock level')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('department', models.ForeignKey(blank=True, help_text='Empty = only managers may change stock', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='products', to='stockledger.department', verbose_name='Department')),
            ],
            options={
                'verbose_name': 'Product',
                'verbose_name_plural': 'Products',
                'db_table': 'products',
                'ordering': ['name'],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('quantity_in_stock__gte', 0)), name='product_quantity_non_negative'),
                    models.CheckConstraint(condition=models.Q(('minimum_stock_level__gte', 0)), name='product_minimum_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='LedgerEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('change_kind', models.CharField(choices=[('restock', 'Restock'), ('sale', 'Sale'), ('adjustment', 'Adjustment'), ('return', 'Return')], max_length=20, verbose_name='Change kind')),
                ('quantity_delta', models.IntegerField(help_text='Positive = stock in, negative = stock out', verbose_name='Delta')),
                ('quantity_before', models.PositiveIntegerField(verbose_name='Before')),
                ('quantity_after', models.PositiveIntegerField(verbose_name='After')),
                ('reason', models.CharField(blank=True, default='', max_length=500, verbose_name='Reason')),
                ('reference', models.CharField(blank=True, default='', max_length=100, verbose_name='Reference')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Created at')),
                ('actor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='Actor')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='ledger_entries', to='stockledger.product', verbose_name='Product')),
            ],
            options={
                'verbose_name': 'Ledger entry',
                'verbose_name_plural': 'Ledger entries',
                'db_table': 'inventory_logs',
                'ordering': ['created_at', 'id'],
                'indexes': [
                    models.Index(fields=['product', 'created_at'], name='inventory_log_product_idx'),
                    models.Index(fields=['change_kind', 'created_at'], name='inventory_log_kind_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('quantity_after', models.F('quantity_before') + models.F('quantity_delta'))), name='ledger_entry_balanced'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StockAlert',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('message', models.TextField(verbose_name='Message')),
                ('acknowledged', models.BooleanField(default=False, verbose_name='Acknowledged')),
                ('acknowledged_at', models.DateTimeField(blank=True, null=True, verbose_name='Acknowledged at')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Created at')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='alerts', to='stockledger.product', verbose_name='Product')),
            ],
            options={
                'verbose_name': 'Stock alert',
                'verbose_name_plural': 'Stock alerts',
                'ordering': ['-created_at', '-id'],
                'db_table': 'stock_alerts',
                'indexes': [
                    models.Index(fields=['acknowledged', 'created_at'], name='stock_alert_open_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('acknowledged', False)), fields=('product',), name='unique_open_alert_per_product'),
                ],
            },
        ),
    ]
