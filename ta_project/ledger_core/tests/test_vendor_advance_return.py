from decimal import Decimal

from django.test import TestCase

from ..exceptions import InsufficientBalance
from ..models import LedgerEntry, Vendor, VendorAdvanceReturn
from ..models.ledger import RECEIV, VENDOR_ADVANCE_RETURN
from ..models.vendor import ADVANCE, DUE
from ..services.vendor_advance_return import (create_vendor_advance_return,
                                              delete_vendor_advance_return,
                                              update_vendor_advance_return)
from .utils import balances_of, make_books


class VendorAdvanceReturnTests(TestCase):
    def setUp(self):
        self.books = make_books("Sky")
        self.company = self.books["company"]
        self.vendor = self.books["vendor"]
        self.vendor.set_signed_balance(Decimal("300.00"))
        self.vendor.save()
        self.cash = self.books["cash"]

    def _payload(self, **overrides):
        data = {"vendor_id": self.vendor.pk, "account_id": self.cash.pk, "amount": "120"}
        data.update(overrides)
        return data

    def test_create_reduces_vendor_advance(self):
        result = create_vendor_advance_return(self.company, self._payload())

        self.assertEqual(result.voucher_no, "ADVR-0001")
        self.assertEqual(balances_of(self.vendor, self.cash), [Decimal("180.00"), Decimal("1120.00")])
        vendor = Vendor.objects.get(pk=self.vendor.pk)
        self.assertEqual(vendor.present_balance_type, ADVANCE)
        self.assertEqual(result.display["vendor_balance_type"], ADVANCE)
        self.assertEqual(result.display["vendor_balance_amount"], "180.00")

        entry = LedgerEntry.objects.get(voucher_no="ADVR-0001")
        self.assertEqual(entry.direction, RECEIV)
        self.assertEqual(entry.vendor_id, self.vendor.pk)
        self.assertEqual(entry.operation, VENDOR_ADVANCE_RETURN)

    def test_cannot_return_more_than_the_advance(self):
        with self.assertRaises(InsufficientBalance) as ctx:
            create_vendor_advance_return(self.company, self._payload(amount="300.50"))

        self.assertEqual(ctx.exception.details["available"], "300.00")
        self.assertEqual(balances_of(self.vendor)[0], Decimal("300.00"))
        self.assertFalse(VendorAdvanceReturn.objects.exists())

    def test_vendor_in_due_has_nothing_to_return(self):
        self.vendor.set_signed_balance(Decimal("-50.00"))
        self.vendor.save()
        with self.assertRaises(InsufficientBalance):
            create_vendor_advance_return(self.company, self._payload(amount="1"))

    def test_delete_of_a_return_can_flip_due_back_to_advance(self):
        result = create_vendor_advance_return(self.company, self._payload(amount="300"))
        self.assertEqual(balances_of(self.vendor)[0], Decimal("0.00"))

        # vendor moves into due by other business
        self.vendor.set_signed_balance(Decimal("-40.00"))
        self.vendor.save()

        delete_vendor_advance_return(self.company, result.record.pk)

        vendor = Vendor.objects.get(pk=self.vendor.pk)
        self.assertEqual(vendor.signed_balance, Decimal("260.00"))
        self.assertEqual(vendor.present_balance_type, ADVANCE)
        self.assertEqual(balances_of(self.cash)[0], Decimal("1000.00"))

    def test_update_reposts_under_the_same_voucher(self):
        result = create_vendor_advance_return(self.company, self._payload())
        update_vendor_advance_return(self.company, result.record.pk, {"amount": "300"})

        self.assertEqual(balances_of(self.vendor, self.cash), [Decimal("0.00"), Decimal("1300.00")])
        self.assertEqual(LedgerEntry.objects.filter(voucher_no="ADVR-0001").count(), 1)

    def test_tag_follows_sign(self):
        self.vendor.set_signed_balance(Decimal("-10"))
        self.assertEqual((self.vendor.present_balance_type, self.vendor.present_balance_amount),
                         (DUE, Decimal("10")))
        self.vendor.set_signed_balance(Decimal("0"))
        self.assertEqual(self.vendor.present_balance_type, ADVANCE)
