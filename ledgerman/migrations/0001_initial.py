"""
Initial migration for Ledgerman models.
"""

from decimal import Decimal
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


BRAND_CHOICES = [('green_tel', 'Green Tel'), ('green_star', 'Green Star'), ('ecommerce', 'Ecommerce')]
BUCKET_CHOICES = [('good', 'Good'), ('bad', 'Bad'), ('damage', 'Damage'), ('repair', 'Repair')]


def money(**kwargs):
    return models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=14, **kwargs)


class Migration(migrations.Migration):
    """Create Ledgerman models: Party, Product, StockMove, ledgers, claims, documents."""

    initial = True

    dependencies = [
        ('contenttypes', '0002_remove_content_type_name'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Party',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('kind', models.CharField(choices=[('customer', 'Customer'), ('supplier', 'Supplier'), ('employee', 'Employee')], db_index=True, max_length=20, verbose_name='Kind')),
                ('customer_type', models.CharField(blank=True, choices=[('retail', 'Retail'), ('dealer', 'Dealer'), ('ecommerce', 'Ecommerce')], default='', help_text='Customers only', max_length=20, verbose_name='Customer Type')),
                ('brand_scope', models.CharField(choices=[('green_tel', 'Green Tel'), ('green_star', 'Green Star'), ('both', 'Both')], default='both', max_length=20, verbose_name='Brands')),
                ('name', models.CharField(max_length=150, verbose_name='Name')),
                ('company_name', models.CharField(blank=True, default='', max_length=150)),
                ('phone', models.CharField(blank=True, default='', max_length=30)),
                ('email', models.EmailField(blank=True, default='', max_length=254)),
                ('address', models.CharField(blank=True, default='', max_length=255)),
                ('district', models.CharField(blank=True, db_index=True, default='', max_length=80)),
                ('total_quantity', models.PositiveIntegerField(default=0, verbose_name='Total Quantity')),
                ('total_amount', money(verbose_name='Total Sales/Purchases')),
                ('total_payment', money(verbose_name='Total Payment')),
                ('total_adjust', money(help_text='Net credit from adjustments, returns and replacements', verbose_name='Total Adjustment')),
                ('total_dues', money(help_text='Sum of the latest balance of every brand stream', verbose_name='Total Dues')),
                ('last_document_no', models.CharField(blank=True, default='', max_length=30)),
                ('last_document_qty', models.PositiveIntegerField(blank=True, null=True)),
                ('last_document_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('last_document_date', models.DateField(blank=True, null=True)),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Party',
                'verbose_name_plural': 'Parties',
                'ordering': ['name'],
                'indexes': [models.Index(fields=['kind', 'customer_type'], name='party_kind_type_idx')],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('model_name', models.CharField(max_length=120, verbose_name='Model Name')),
                ('brand', models.CharField(choices=BRAND_CHOICES, db_index=True, max_length=20, verbose_name='Brand')),
                ('type', models.CharField(choices=[('product', 'Product'), ('packet', 'Packet'), ('others', 'Others')], default='product', max_length=20, verbose_name='Type')),
                ('purchase_price', money()),
                ('sales_price', money()),
                ('dealer_price', money()),
                ('good_qty', models.PositiveIntegerField(default=0, verbose_name='Good')),
                ('bad_qty', models.PositiveIntegerField(default=0, verbose_name='Bad')),
                ('damage_qty', models.PositiveIntegerField(default=0, verbose_name='Damage')),
                ('repair_qty', models.PositiveIntegerField(default=0, verbose_name='Repair')),
                ('description', models.TextField(blank=True, default='')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('supplier', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='supplied_products', to='ledgerman.party', verbose_name='Supplier')),
            ],
            options={
                'verbose_name': 'Product',
                'verbose_name_plural': 'Products',
                'ordering': ['brand', 'model_name'],
                'indexes': [models.Index(fields=['brand', 'type'], name='product_brand_type_idx')],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(('good_qty__gte', 0), ('bad_qty__gte', 0), ('damage_qty__gte', 0), ('repair_qty__gte', 0)),
                        name='product_buckets_non_negative',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='StockMove',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('bucket', models.CharField(choices=BUCKET_CHOICES, max_length=10, verbose_name='Bucket')),
                ('delta', models.IntegerField(help_text='Positive = in, Negative = out', verbose_name='Delta')),
                ('reference_id', models.PositiveIntegerField(blank=True, null=True)),
                ('reason', models.CharField(max_length=255, verbose_name='Reason')),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='moves', to='ledgerman.product', verbose_name='Product')),
                ('reference_type', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='contenttypes.contenttype')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Stock Move',
                'verbose_name_plural': 'Stock Moves',
                'ordering': ['timestamp', 'pk'],
                'indexes': [models.Index(fields=['product', 'bucket'], name='stockmove_product_bucket_idx')],
            },
        ),
        migrations.CreateModel(
            name='LedgerStream',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('brand', models.CharField(choices=BRAND_CHOICES, max_length=20, verbose_name='Brand')),
                ('sequence', models.PositiveIntegerField(default=0, verbose_name='Entries')),
                ('balance', money(verbose_name='Balance')),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('party', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='streams', to='ledgerman.party', verbose_name='Party')),
            ],
            options={
                'verbose_name': 'Ledger Stream',
                'verbose_name_plural': 'Ledger Streams',
                'constraints': [models.UniqueConstraint(fields=('party', 'brand'), name='unique_ledger_stream')],
            },
        ),
        migrations.CreateModel(
            name='LedgerEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('brand', models.CharField(choices=BRAND_CHOICES, max_length=20, verbose_name='Brand')),
                ('sequence', models.PositiveIntegerField(verbose_name='Sequence')),
                ('kind', models.CharField(choices=[('invoice', 'Invoice'), ('payment', 'Payment'), ('adjustment', 'Adjustment'), ('return', 'Return'), ('replacement', 'Replacement'), ('opening', 'Opening')], max_length=20, verbose_name='Kind')),
                ('debit', money()),
                ('credit', money()),
                ('balance', models.DecimalField(decimal_places=2, max_digits=14, verbose_name='Balance')),
                ('reference_id', models.PositiveIntegerField(blank=True, null=True)),
                ('reference_no', models.CharField(blank=True, default='', max_length=30)),
                ('description', models.CharField(blank=True, default='', max_length=255)),
                ('date', models.DateField(db_index=True, default=django.utils.timezone.localdate, verbose_name='Effective Date')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('stream', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='entries', to='ledgerman.ledgerstream')),
                ('party', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='ledger_entries', to='ledgerman.party', verbose_name='Party')),
                ('reference_type', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='contenttypes.contenttype')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Ledger Entry',
                'verbose_name_plural': 'Ledger Entries',
                'ordering': ['stream', 'sequence'],
                'indexes': [
                    models.Index(fields=['party', 'brand', 'sequence'], name='ledger_party_brand_seq_idx'),
                    models.Index(fields=['kind'], name='ledger_kind_idx'),
                ],
                'constraints': [models.UniqueConstraint(fields=('stream', 'sequence'), name='unique_ledger_sequence')],
            },
        ),
        migrations.CreateModel(
            name='ReplacementClaim',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('number', models.CharField(max_length=30, unique=True, verbose_name='Claim No')),
                ('brand', models.CharField(choices=BRAND_CHOICES, max_length=20, verbose_name='Brand')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('checked', 'Checked'), ('sent_to_factory', 'Sent to Factory'), ('repaired', 'Repaired'), ('closed', 'Closed')], db_index=True, default='pending', max_length=20, verbose_name='Status')),
                ('total_claimed', models.PositiveIntegerField(default=0)),
                ('total_good', models.PositiveIntegerField(default=0)),
                ('total_repairable', models.PositiveIntegerField(default=0)),
                ('total_bad', models.PositiveIntegerField(default=0)),
                ('total_damage', models.PositiveIntegerField(default=0)),
                ('total_rejected', models.PositiveIntegerField(default=0)),
                ('total_credit', money()),
                ('repair_sent_date', models.DateField(blank=True, null=True, verbose_name='Sent to Factory')),
                ('repair_received_date', models.DateField(blank=True, null=True, verbose_name='Received from Factory')),
                ('high_cost_qty', models.PositiveIntegerField(default=0, help_text='Major repairs (e.g. PCB)', verbose_name='High-cost Repairs')),
                ('low_cost_qty', models.PositiveIntegerField(default=0, verbose_name='Low-cost Repairs')),
                ('repair_cost', money()),
                ('repair_note', models.CharField(blank=True, default='', max_length=255)),
                ('stock_applied', models.BooleanField(default=False, verbose_name='Stock Applied')),
                ('ledger_applied', models.BooleanField(default=False, verbose_name='Ledger Applied')),
                ('date', models.DateField(default=django.utils.timezone.localdate)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('dealer', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='claims', to='ledgerman.party', verbose_name='Dealer')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Replacement Claim',
                'verbose_name_plural': 'Replacement Claims',
                'ordering': ['-date', '-pk'],
                'indexes': [
                    models.Index(fields=['dealer', 'status'], name='claim_dealer_status_idx'),
                    models.Index(fields=['brand', 'status'], name='claim_brand_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ClaimItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_name', models.CharField(max_length=120)),
                ('claimed_qty', models.PositiveIntegerField()),
                ('good_qty', models.PositiveIntegerField(default=0)),
                ('repairable_qty', models.PositiveIntegerField(default=0)),
                ('bad_qty', models.PositiveIntegerField(default=0)),
                ('damage_qty', models.PositiveIntegerField(default=0)),
                ('rejected_qty', models.PositiveIntegerField(default=0)),
                ('unit_price', money()),
                ('credit', money()),
                ('claim', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='ledgerman.replacementclaim')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='+', to='ledgerman.product')),
            ],
            options={
                'verbose_name': 'Claim Item',
                'verbose_name_plural': 'Claim Items',
                'constraints': [models.UniqueConstraint(fields=('claim', 'product'), name='unique_claim_product')],
            },
        ),
        migrations.CreateModel(
            name='Invoice',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('number', models.CharField(max_length=30, unique=True, verbose_name='Invoice No')),
                ('brand', models.CharField(choices=BRAND_CHOICES, max_length=20)),
                ('date', models.DateField(db_index=True, default=django.utils.timezone.localdate)),
                ('total_qty', models.PositiveIntegerField(default=0)),
                ('subtotal', money()),
                ('discount', money()),
                ('rebate', money()),
                ('grand_total', money()),
                ('paid_amount', money()),
                ('dues', money(help_text='grand_total - paid_amount')),
                ('previous_dues', money(help_text='Brand balance before this invoice')),
                ('note', models.CharField(blank=True, default='', max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='invoices', to='ledgerman.party')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Invoice',
                'verbose_name_plural': 'Invoices',
                'ordering': ['-date', '-pk'],
            },
        ),
        migrations.CreateModel(
            name='InvoiceItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_name', models.CharField(max_length=120)),
                ('qty', models.PositiveIntegerField()),
                ('price', models.DecimalField(decimal_places=2, max_digits=14)),
                ('total', models.DecimalField(decimal_places=2, max_digits=14)),
                ('invoice', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='ledgerman.invoice')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='+', to='ledgerman.product')),
            ],
        ),
        migrations.CreateModel(
            name='Purchase',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('number', models.CharField(max_length=30, unique=True, verbose_name='Purchase No')),
                ('brand', models.CharField(choices=BRAND_CHOICES, max_length=20)),
                ('date', models.DateField(db_index=True, default=django.utils.timezone.localdate)),
                ('total_qty', models.PositiveIntegerField(default=0)),
                ('total_amount', money()),
                ('paid_amount', money()),
                ('dues', money()),
                ('note', models.CharField(blank=True, default='', max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('supplier', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='purchases', to='ledgerman.party')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Purchase',
                'verbose_name_plural': 'Purchases',
                'ordering': ['-date', '-pk'],
            },
        ),
        migrations.CreateModel(
            name='PurchaseItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_name', models.CharField(max_length=120)),
                ('qty', models.PositiveIntegerField()),
                ('price', models.DecimalField(decimal_places=2, max_digits=14)),
                ('total', models.DecimalField(decimal_places=2, max_digits=14)),
                ('purchase', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='ledgerman.purchase')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='+', to='ledgerman.product')),
            ],
        ),
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('number', models.CharField(max_length=30, unique=True, verbose_name='Payment No')),
                ('kind', models.CharField(choices=[('customer', 'Customer'), ('dealer', 'Dealer'), ('supplier', 'Supplier'), ('purchase', 'Purchase'), ('employee', 'Employee')], db_index=True, max_length=20)),
                ('brand', models.CharField(choices=BRAND_CHOICES, max_length=20)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('method', models.CharField(choices=[('cash', 'Cash'), ('bank', 'Bank'), ('mobile', 'Mobile Banking')], default='cash', max_length=20)),
                ('description', models.CharField(blank=True, default='', max_length=255)),
                ('date', models.DateField(db_index=True, default=django.utils.timezone.localdate)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('party', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='payments', to='ledgerman.party')),
                ('purchase', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='payments', to='ledgerman.purchase')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Payment',
                'verbose_name_plural': 'Payments',
                'ordering': ['-date', '-pk'],
            },
        ),
        migrations.CreateModel(
            name='DocumentCounter',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('brand', models.CharField(choices=BRAND_CHOICES, max_length=20)),
                ('kind', models.CharField(choices=[('invoice', 'Invoice'), ('purchase', 'Purchase'), ('claim', 'Replacement Claim'), ('payment', 'Payment')], max_length=20)),
                ('value', models.PositiveIntegerField(default=0, verbose_name='Last Number')),
            ],
            options={
                'verbose_name': 'Document Counter',
                'verbose_name_plural': 'Document Counters',
                'constraints': [models.UniqueConstraint(fields=('brand', 'kind'), name='unique_document_counter')],
            },
        ),
    ]
