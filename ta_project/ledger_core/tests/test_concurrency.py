import threading
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

from django.db import connection, transaction
from django.test import TransactionTestCase, skipUnlessDBFeature

from ..models import Investment, LedgerEntry
from ..services import sequences
from ..services.investment import create_investment
from .utils import balances_of, make_books

WORKERS = 8


# SQLite ignores select_for_update(); these need real row locks (PostgreSQL, MySQL)
@skipUnlessDBFeature("has_select_for_update")
class ConcurrentPostingTests(TransactionTestCase):
    def setUp(self):
        self.books = make_books("Sky")
        self.company = self.books["company"]

    def _run_together(self, fn):
        barrier = threading.Barrier(WORKERS)

        def worker(_):
            try:
                barrier.wait(timeout=10)
                return fn()
            finally:
                # each thread got its own connection
                connection.close()

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            return list(pool.map(worker, range(WORKERS)))

    def test_parallel_voucher_allocation_never_repeats(self):
        def allocate():
            with transaction.atomic():
                return sequences.next_voucher(sequences.EXPENSE, self.company)

        vouchers = self._run_together(allocate)

        self.assertEqual(
            sorted(vouchers), [f"EX-{n:04d}" for n in range(1, WORKERS + 1)]
        )

    def test_parallel_postings_get_distinct_increasing_vouchers(self):
        cash = self.books["cash"]

        results = self._run_together(
            lambda: create_investment(self.company, {"account_id": cash.pk, "amount": "1"})
        )

        vouchers = sorted(r.voucher_no for r in results)
        self.assertEqual(vouchers, [f"IVT-{n:04d}" for n in range(1, WORKERS + 1)])

        # the counter lock serializes the units: commit order is voucher order
        in_commit_order = list(
            Investment.objects.for_company(self.company).order_by("id")
            .values_list("voucher_no", flat=True)
        )
        self.assertEqual(in_commit_order, vouchers)

        # no lost updates on the shared account
        self.assertEqual(balances_of(cash)[0], Decimal("1000.00") + WORKERS)
        totals = list(
            LedgerEntry.objects.filter(account=cash)
            .order_by("id").values_list("last_total_amount", flat=True)
        )
        self.assertEqual(totals, [Decimal("1000.00") + n for n in range(1, WORKERS + 1)])
