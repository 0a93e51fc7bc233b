"""
Enums for Ledgerman models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Brand(models.TextChoices):
    """Product line. Ledgers, stock and document numbers are partitioned per brand."""
    GREEN_TEL = 'green_tel', _('Green Tel')
    GREEN_STAR = 'green_star', _('Green Star')
    ECOMMERCE = 'ecommerce', _('Ecommerce')


class BrandScope(models.TextChoices):
    """Brands a customer buys from."""
    GREEN_TEL = 'green_tel', _('Green Tel')
    GREEN_STAR = 'green_star', _('Green Star')
    BOTH = 'both', _('Both')


class ProductType(models.TextChoices):
    PRODUCT = 'product', _('Product')
    PACKET = 'packet', _('Packet')
    OTHERS = 'others', _('Others')


class StockBucket(models.TextChoices):
    """
    Physical condition of held units.

    GOOD:   sellable
    BAD:    rejected, not repairable
    DAMAGE: rejected, physically damaged
    REPAIR: waiting for or at factory repair
    """
    GOOD = 'good', _('Good')
    BAD = 'bad', _('Bad')
    DAMAGE = 'damage', _('Damage')
    REPAIR = 'repair', _('Repair')

    @property
    def field_name(self) -> str:
        """Product counter column for this bucket."""
        return f'{self.value}_qty'


class PartyKind(models.TextChoices):
    CUSTOMER = 'customer', _('Customer')
    SUPPLIER = 'supplier', _('Supplier')
    EMPLOYEE = 'employee', _('Employee')


class CustomerType(models.TextChoices):
    RETAIL = 'retail', _('Retail')
    DEALER = 'dealer', _('Dealer')
    ECOMMERCE = 'ecommerce', _('Ecommerce')


class EntryKind(models.TextChoices):
    """Ledger entry kind."""
    INVOICE = 'invoice', _('Invoice')
    PAYMENT = 'payment', _('Payment')
    ADJUSTMENT = 'adjustment', _('Adjustment')
    RETURN = 'return', _('Return')
    REPLACEMENT = 'replacement', _('Replacement')
    OPENING = 'opening', _('Opening')
    VOID = 'void', _('Void')                           # Reverses a voided invoice


class ClaimStatus(models.TextChoices):
    """Replacement claim lifecycle status."""
    PENDING = 'pending', _('Pending')                  # Received from dealer
    CHECKED = 'checked', _('Checked')                  # Triage done, stock and credit applied
    SENT_TO_FACTORY = 'sent_to_factory', _('Sent to Factory')
    REPAIRED = 'repaired', _('Repaired')               # Repaired units back in good stock
    CLOSED = 'closed', _('Closed')


class PaymentKind(models.TextChoices):
    CUSTOMER = 'customer', _('Customer')
    DEALER = 'dealer', _('Dealer')
    SUPPLIER = 'supplier', _('Supplier')
    PURCHASE = 'purchase', _('Purchase')
    EMPLOYEE = 'employee', _('Employee')


class PaymentMethod(models.TextChoices):
    CASH = 'cash', _('Cash')
    BANK = 'bank', _('Bank')
    MOBILE = 'mobile', _('Mobile Banking')


class DocumentKind(models.TextChoices):
    """Numbered document families (one counter per brand and kind)."""
    INVOICE = 'invoice', _('Invoice')
    PURCHASE = 'purchase', _('Purchase')
    CLAIM = 'claim', _('Replacement Claim')
    PAYMENT = 'payment', _('Payment')
