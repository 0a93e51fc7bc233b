"""
Ledgerman Admin — read-only views for auditing.

Stock, balances and claims only change through ledgerman.books; the admin
shows them and offers one repair action:
- Product: buckets read-only, catalog fields editable
- StockMove / LedgerEntry: immutable audit trails
- Party: contact fields editable, summary read-only, "rebuild summary" action
- ReplacementClaim: read-only with items inline
- Invoice / Purchase / Payment: read-only documents
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from ledgerman.models import (
    ClaimItem,
    Invoice,
    InvoiceItem,
    LedgerEntry,
    Party,
    Payment,
    Product,
    Purchase,
    PurchaseItem,
    ReplacementClaim,
    StockMove,
)


class ReadOnlyAdminMixin:
    """No add, change or delete through the admin."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =========================================================================
# PRODUCT ADMIN
# =========================================================================

@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Product admin — catalog editable, buckets read-only."""

    list_display = ['model_name', 'brand', 'type', 'good_qty', 'bad_qty',
                    'damage_qty', 'repair_qty', 'is_active']
    list_filter = ['brand', 'type', 'is_active']
    search_fields = ['model_name']
    readonly_fields = ['good_qty', 'bad_qty', 'damage_qty', 'repair_qty',
                       'created_at', 'updated_at']
    actions = ['recalculate_buckets']

    @admin.action(description=_('Recalculate buckets from stock moves'))
    def recalculate_buckets(self, request, queryset):
        corrected = sum(1 for product in queryset if product.recalculate())
        self.message_user(request, _('{count} product(s) corrected.').format(count=corrected))


# =========================================================================
# STOCK MOVE ADMIN (read-only audit trail)
# =========================================================================

@admin.register(StockMove)
class StockMoveAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """StockMove admin — read-only. Immutable audit trail."""

    list_display = ['timestamp', 'product', 'bucket', 'delta', 'reason', 'user']
    list_filter = ['bucket', 'timestamp']
    search_fields = ['reason', 'product__model_name']
    date_hierarchy = 'timestamp'


# =========================================================================
# PARTY ADMIN (summary read-only with rebuild action)
# =========================================================================

@admin.register(Party)
class PartyAdmin(admin.ModelAdmin):
    """Party admin — contact editable, summary cache read-only."""

    list_display = ['name', 'kind', 'customer_type', 'phone', 'total_amount',
                    'total_payment', 'total_dues', 'is_active']
    list_filter = ['kind', 'customer_type', 'brand_scope', 'is_active']
    search_fields = ['name', 'company_name', 'phone', 'district']
    readonly_fields = list(Party.SUMMARY_FIELDS) + [
        'last_document_no', 'last_document_qty', 'last_document_amount',
        'last_document_date', 'created_at', 'updated_at',
    ]
    actions = ['rebuild_summaries']

    @admin.action(description=_('Rebuild summary from ledger'))
    def rebuild_summaries(self, request, queryset):
        from ledgerman import books

        count = 0
        for party in queryset:
            if books.rebuild_summary(party):
                count += 1
        self.message_user(request, _('{count} summary(ies) corrected.').format(count=count))


# =========================================================================
# LEDGER ENTRY ADMIN (read-only audit trail)
# =========================================================================

@admin.register(LedgerEntry)
class LedgerEntryAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """LedgerEntry admin — read-only. Corrections are Adjustment entries."""

    list_display = ['party', 'brand', 'sequence', 'kind', 'debit', 'credit',
                    'balance', 'reference_no', 'date']
    list_filter = ['brand', 'kind', 'date']
    search_fields = ['party__name', 'reference_no', 'description']
    ordering = ['party', 'brand', 'sequence']
    date_hierarchy = 'date'


# =========================================================================
# REPLACEMENT CLAIM ADMIN
# =========================================================================

class ClaimItemInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = ClaimItem
    extra = 0
    fields = ['product_name', 'claimed_qty', 'good_qty', 'repairable_qty',
              'bad_qty', 'damage_qty', 'rejected_qty', 'unit_price', 'credit']


@admin.register(ReplacementClaim)
class ReplacementClaimAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """ReplacementClaim admin — read-only. Transitions go through books."""

    list_display = ['number', 'dealer', 'brand', 'status', 'total_claimed',
                    'total_good', 'total_repairable', 'total_rejected',
                    'total_credit', 'date']
    list_filter = ['status', 'brand', 'date']
    search_fields = ['number', 'dealer__name']
    date_hierarchy = 'date'
    inlines = [ClaimItemInline]


# =========================================================================
# DOCUMENTS (read-only)
# =========================================================================

class InvoiceItemInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = InvoiceItem
    extra = 0


class PurchaseItemInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = PurchaseItem
    extra = 0


@admin.register(Invoice)
class InvoiceAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ['number', 'customer', 'brand', 'total_qty', 'grand_total',
                    'paid_amount', 'dues', 'date', 'voided_at']
    list_filter = ['brand', 'date', ('voided_at', admin.EmptyFieldListFilter)]
    search_fields = ['number', 'customer__name']
    date_hierarchy = 'date'
    inlines = [InvoiceItemInline]


@admin.register(Purchase)
class PurchaseAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ['number', 'supplier', 'brand', 'total_qty', 'total_amount',
                    'paid_amount', 'dues', 'date']
    list_filter = ['brand', 'date']
    search_fields = ['number', 'supplier__name']
    date_hierarchy = 'date'
    inlines = [PurchaseItemInline]


@admin.register(Payment)
class PaymentAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ['number', 'kind', 'party', 'brand', 'amount', 'method', 'date']
    list_filter = ['kind', 'method', 'brand', 'date']
    search_fields = ['number', 'party__name', 'description']
    date_hierarchy = 'date'
