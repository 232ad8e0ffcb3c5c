"""
Client due reconciliation.

Recomputes what each client should owe from the contract, the initial payment
and the client's money-receipt ledger rows, and compares it with the stored
Client.due_amount. report() only reads; reconcile() writes corrections back
through the balance store, one atomic block per client.
"""
import logging
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.db.models import Count, Max
from django.utils import timezone

from ..exceptions import LedgerError, NotFound, StoreFailure
from ..models import Client, LedgerEntry
from ..models.ledger import CLIENT_PAYMENT, RECEIV
from . import balances
from .audit_helper import log_action
from .base import posting_unit

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def default_threshold():
    return Decimal(str(getattr(settings, "LEDGER_RECONCILE_THRESHOLD", "0.01")))


@dataclass
class ClientReconciliation:
    """Outcome for one client."""
    client_id: int
    client_name: str
    old_due_amount: Decimal
    new_due_amount: Decimal
    difference: Decimal
    was_reconciled: bool
    error: Optional[str] = None

    def to_dict(self):
        data = asdict(self)
        for key in ("old_due_amount", "new_due_amount", "difference"):
            data[key] = str(data[key])
        return data


class ReconciliationChecker:
    """
    Drift detection and repair for one company's client due amounts.

    Attributes:
        company: tenant being checked.
        threshold: drift at or below this is treated as rounding noise.
    """

    def __init__(self, company, threshold=None, user=None):
        self.company = company
        self.threshold = default_threshold() if threshold is None else Decimal(threshold)
        self.user = user

    # ----------------------------
    # Reads
    # ----------------------------
    def clients(self):
        return Client.objects.for_company(self.company).filter(is_archived=False).order_by("id")

    def _payment_entries(self, client):
        return LedgerEntry.objects.for_company(self.company).filter(
            client=client, operation=CLIENT_PAYMENT
        )

    def net_received(self, client) -> Decimal:
        """Signed sum of the client's money-receipt rows (receiv +, payout -)."""
        net = ZERO
        for direction, amount in self._payment_entries(client).values_list("direction", "amount"):
            net += amount if direction == RECEIV else -amount
        return net

    def expected_due(self, client) -> Decimal:
        expected = client.contract_amount - client.initial_payment - self.net_received(client)
        return max(ZERO, expected)

    def report(self) -> Dict[str, Any]:
        """Read-only drift report for every non-archived client."""
        details = []
        drifting = 0
        for client in self.clients():
            expected = self.expected_due(client)
            difference = client.due_amount - expected
            stats = self._payment_entries(client).aggregate(
                count=Count("id"), last_date=Max("date")
            )
            is_drifting = abs(difference) > self.threshold
            if is_drifting:
                drifting += 1
            details.append({
                "client_id": client.pk,
                "client_name": client.name,
                "contract_amount": str(client.contract_amount),
                "initial_payment": str(client.initial_payment),
                "current_due_amount": str(client.due_amount),
                "calculated_due_amount": str(expected),
                "difference": str(difference),
                "is_drifting": is_drifting,
                "transaction_count": stats["count"],
                "last_transaction_date": (
                    stats["last_date"].isoformat() if stats["last_date"] else None
                ),
            })
        return {
            "total_clients": len(details),
            "drifting_clients": drifting,
            "details": details,
        }

    # ----------------------------
    # Writes
    # ----------------------------
    def reconcile_client(self, client) -> ClientReconciliation:
        """Correct one client inside its own atomic block."""
        with posting_unit("reconciliation.reconcile_client"):
            pk = client.pk if isinstance(client, Client) else client
            try:
                locked = Client.objects.locked_for_company(self.company).get(pk=pk)
            except (Client.DoesNotExist, ValueError, TypeError):
                raise NotFound.for_model("Client", pk) from None

            expected = self.expected_due(locked)
            old_due = locked.due_amount
            difference = expected - old_due
            was_reconciled = abs(difference) > self.threshold

            if was_reconciled:
                balances.apply_delta(balances.CLIENT_DUE, locked, difference)
                locked.last_reconciled_at = timezone.now()
                locked.reconciliation_difference = difference
                locked.save(update_fields=["last_reconciled_at", "reconciliation_difference"])
                log_action(
                    action="RECONCILE_BALANCE",
                    instance=locked,
                    user=self.user,
                    company=self.company,
                    balance_before=old_due,
                    balance_after=locked.due_amount,
                    changes={
                        "difference": str(difference),
                        "contract_amount": str(locked.contract_amount),
                        "initial_payment": str(locked.initial_payment),
                    },
                )
                logger.info(
                    "Reconciled client %s: due %s -> %s (company %s)",
                    locked.pk, old_due, locked.due_amount, self.company.pk,
                )

        return ClientReconciliation(
            client_id=locked.pk,
            client_name=locked.name,
            old_due_amount=old_due,
            new_due_amount=locked.due_amount,
            difference=difference,
            was_reconciled=was_reconciled,
        )

    def reconcile(self) -> Dict[str, Any]:
        """Batch pass; a failing client is reported and the rest carry on."""
        results: List[ClientReconciliation] = []
        errors: List[str] = []
        reconciled = 0
        total_difference = ZERO

        clients = list(self.clients())
        for client in clients:
            try:
                result = self.reconcile_client(client)
            except LedgerError as exc:
                if isinstance(exc, StoreFailure):
                    logger.error("Reconciliation failed for client %s: %s", client.pk, exc)
                errors.append(f"Client {client.pk}: {exc.message}")
                result = ClientReconciliation(
                    client_id=client.pk,
                    client_name=client.name,
                    old_due_amount=client.due_amount,
                    new_due_amount=client.due_amount,
                    difference=ZERO,
                    was_reconciled=False,
                    error=exc.message,
                )
            results.append(result)
            if result.was_reconciled:
                reconciled += 1
                total_difference += abs(result.difference)

        return {
            "total_clients": len(clients),
            "reconciled_clients": reconciled,
            "total_difference": str(total_difference),
            "results": [r.to_dict() for r in results],
            "errors": errors,
        }
