from decimal import Decimal

from django.test import TestCase

from ..exceptions import InsufficientBalance, InvalidAmount, InvalidRequest, NotFound
from ..models import AdvanceReturn, LedgerEntry
from ..models.ledger import ADVANCE_RETURN, RECEIV
from ..services.advance_return import (create_advance_return,
                                       delete_advance_return,
                                       update_advance_return)
from .utils import balances_of, make_books


class AdvanceReturnTests(TestCase):
    def setUp(self):
        self.books = make_books("Sky")
        self.company = self.books["company"]
        self.client_row = self.books["client"]
        self.cash = self.books["cash"]

    def _payload(self, **overrides):
        data = {
            "client_id": self.client_row.pk,
            "account_id": self.cash.pk,
            "amount": "200",
            "return_date": "2025-09-17",
            "payment_method": "cash",
        }
        data.update(overrides)
        return data

    def test_create_scenario(self):
        """Client 500 / account 1000, return 200 -> 300 / 1200, one receiv row."""
        result = create_advance_return(self.company, self._payload())

        self.assertEqual(result.voucher_no, "ADR-0001")
        self.assertEqual(balances_of(self.client_row)[0][0], Decimal("300.00"))
        self.assertEqual(balances_of(self.cash)[0], Decimal("1200.00"))

        entries = LedgerEntry.objects.filter(voucher_no="ADR-0001")
        self.assertEqual(entries.count(), 1)
        entry = entries.get()
        self.assertEqual(entry.direction, RECEIV)
        self.assertEqual(entry.amount, Decimal("200.00"))
        self.assertEqual(entry.last_total_amount, Decimal("1200.00"))
        self.assertEqual(entry.client_id, self.client_row.pk)
        self.assertEqual(entry.operation, ADVANCE_RETURN)

        # display fields for the UI
        payload = result.to_dict()
        self.assertEqual(payload["client_name"], self.client_row.name)
        self.assertEqual(payload["account_name"], "Cash")
        self.assertEqual(payload["balances"]["account_balance"], "1200.00")
        self.assertEqual(payload["balances"]["client_present_balance"], "300.00")

    def test_overdraw_rejected_without_side_effects(self):
        with self.assertRaises(InsufficientBalance):
            create_advance_return(self.company, self._payload(amount="500.01"))

        self.assertEqual(balances_of(self.client_row)[0][0], Decimal("500.00"))
        self.assertEqual(balances_of(self.cash)[0], Decimal("1000.00"))
        self.assertFalse(AdvanceReturn.objects.exists())
        self.assertFalse(LedgerEntry.objects.exists())

    def test_returning_the_whole_advance_is_allowed(self):
        create_advance_return(self.company, self._payload(amount="500"))
        self.assertEqual(balances_of(self.client_row)[0][0], Decimal("0.00"))

    def test_invalid_amounts(self):
        for bad in ("0", "-5", "abc", None, "NaN", "Infinity", "0.004", "1e30"):
            with self.subTest(amount=bad):
                with self.assertRaises(InvalidAmount):
                    create_advance_return(self.company, self._payload(amount=bad))

    def test_missing_and_foreign_references(self):
        other = make_books("Other")
        with self.assertRaises(NotFound):
            create_advance_return(self.company, self._payload(client_id=other["client"].pk))
        with self.assertRaises(NotFound):
            create_advance_return(self.company, self._payload(account_id=999999))
        with self.assertRaises(InvalidRequest):
            create_advance_return(self.company, self._payload(client_id=None))

    def test_bad_date_and_payment_method(self):
        with self.assertRaises(InvalidRequest):
            create_advance_return(self.company, self._payload(return_date="17/09/2025"))
        with self.assertRaises(InvalidRequest):
            create_advance_return(self.company, self._payload(payment_method="barter"))
        self.assertFalse(LedgerEntry.objects.exists())
        self.assertEqual(balances_of(self.cash)[0], Decimal("1000.00"))

    def test_update_reverses_then_reposts_with_same_voucher(self):
        result = create_advance_return(self.company, self._payload())
        updated = update_advance_return(
            self.company, result.record.pk, {"amount": "450", "account_id": self.books["bank"].pk}
        )

        self.assertEqual(updated.voucher_no, "ADR-0001")
        client_present = balances_of(self.client_row)[0][0]
        cash, bank = balances_of(self.cash, self.books["bank"])
        self.assertEqual(client_present, Decimal("50.00"))
        self.assertEqual(cash, Decimal("1000.00"))  # old leg fully reversed
        self.assertEqual(bank, Decimal("850.00"))

        entry = LedgerEntry.objects.get(voucher_no="ADR-0001")
        self.assertEqual(entry.account_id, self.books["bank"].pk)
        self.assertEqual(entry.last_total_amount, Decimal("850.00"))
        self.assertEqual(updated.warnings, [])

    def test_update_coverage_sees_restored_balance(self):
        result = create_advance_return(self.company, self._payload(amount="400"))
        # 100 left on the pool, but 500 is coverable once the 400 is reversed
        update_advance_return(self.company, result.record.pk, {"amount": "500"})
        self.assertEqual(balances_of(self.client_row)[0][0], Decimal("0.00"))

    def test_failed_update_rolls_back_reversal(self):
        result = create_advance_return(self.company, self._payload())
        with self.assertRaises(InsufficientBalance):
            update_advance_return(self.company, result.record.pk, {"amount": "900"})

        self.assertEqual(balances_of(self.client_row)[0][0], Decimal("300.00"))
        self.assertEqual(balances_of(self.cash)[0], Decimal("1200.00"))
        self.assertEqual(LedgerEntry.objects.filter(voucher_no="ADR-0001").count(), 1)
        record = AdvanceReturn.objects.get(pk=result.record.pk)
        self.assertEqual(record.amount, Decimal("200.00"))

    def test_delete_restores_balances_and_removes_entries(self):
        result = create_advance_return(self.company, self._payload())
        deleted = delete_advance_return(self.company, result.record.pk)

        self.assertTrue(deleted.deleted)
        self.assertIsNone(deleted.to_dict()["id"])
        self.assertEqual(balances_of(self.client_row)[0][0], Decimal("500.00"))
        self.assertEqual(balances_of(self.cash)[0], Decimal("1000.00"))
        self.assertFalse(LedgerEntry.objects.filter(voucher_no="ADR-0001").exists())
        self.assertFalse(AdvanceReturn.objects.exists())

    def test_delete_unknown_record(self):
        with self.assertRaises(NotFound):
            delete_advance_return(self.company, 424242)
