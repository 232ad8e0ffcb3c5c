"""
Shared plumbing for the posting orchestrators.

Every create/update/delete runs inside posting_unit(): one transaction.atomic()
block that either commits balances, ledger rows and the operation record
together or rolls all of them back.
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date as date_cls
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, List

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_date as django_parse_date

from ..exceptions import InvalidAmount, InvalidRequest, LedgerError, NotFound, StoreFailure
from ..models.ledger import PAYOUT, RECEIV
from . import balances, ledger

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
# DecimalField(max_digits=18, decimal_places=2) holds at most 16 integer digits
MAX_AMOUNT = Decimal("9999999999999999.99")


# ----------------------------
# Results
# ----------------------------
@dataclass
class PostingResult:
    """What a create/update/delete hands back to views and tests."""
    record: Any
    voucher_no: str
    display: Dict[str, Any] = field(default_factory=dict)
    balances: Dict[str, Decimal] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    deleted: bool = False

    def to_dict(self):
        return {
            "ok": True,
            "id": None if self.deleted else self.record.pk,
            "voucher_no": self.voucher_no,
            "deleted": self.deleted,
            **self.display,
            "balances": {k: str(v) for k, v in self.balances.items()},
            "warnings": list(self.warnings),
        }


@dataclass
class Delta:
    """One signed balance movement. Account deltas also produce a ledger leg."""
    kind: str
    entity: Any
    amount: Decimal
    label: str


# ----------------------------
# Atomic unit
# ----------------------------
@contextmanager
def posting_unit(operation: str):
    """
    transaction.atomic() plus error translation: typed errors pass through,
    model ValidationError becomes InvalidRequest, driver faults StoreFailure.
    """
    try:
        with transaction.atomic():
            yield
    except LedgerError:
        raise
    except ValidationError as exc:
        raise InvalidRequest("; ".join(exc.messages)) from exc
    except DatabaseError as exc:
        logger.exception("Store failure during %s", operation)
        raise StoreFailure.during(operation, exc) from exc


# ----------------------------
# Payload parsing
# ----------------------------
def parse_amount(value, field_name="amount", allow_zero=False) -> Decimal:
    """Decimal from a payload value; rejects negative, non-finite and (by default) zero."""
    if isinstance(value, bool):
        raise InvalidAmount.for_value(field_name, value)
    try:
        amount = Decimal(str(value).strip())
        if not amount.is_finite() or abs(amount) > MAX_AMOUNT:
            raise InvalidAmount.for_value(field_name, value)
        # round first: "0.004" is a zero amount once stored
        amount = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount.for_value(field_name, value) from None
    if amount < 0 or (amount == 0 and not allow_zero):
        raise InvalidAmount.for_value(field_name, value)
    return amount


def parse_date(value, field_name="date"):
    # missing -> today, like the booking screens default
    if value in (None, ""):
        return timezone.localdate()
    if isinstance(value, date_cls):
        return value
    try:
        parsed = django_parse_date(str(value)[:10])
    except ValueError:
        parsed = None
    if parsed is None:
        raise InvalidRequest(f"Invalid {field_name}: {value}")
    return parsed


def merged(data, key, current):
    """Payload value when the key was sent, stored value otherwise."""
    return data[key] if key in data else current


def get_for_company(model, company, pk, label=None, lock=False):
    """Fetch one tenant-owned row or raise NotFound (other tenants' rows included)."""
    label = label or model.__name__
    if pk in (None, ""):
        raise InvalidRequest(f"{label} id is required")
    # lock=True holds the row until the posting unit ends
    qs = (model.objects.locked_for_company(company) if lock
          else model.objects.for_company(company))
    try:
        return qs.get(pk=pk)
    except (model.DoesNotExist, ValueError, TypeError):
        raise NotFound.for_model(label, pk) from None


def acting_user(user):
    if user is not None and getattr(user, "is_authenticated", False):
        return user
    return None


def persist(record):
    record.full_clean()
    record.save()
    return record


# ----------------------------
# Deltas and ledger legs
# ----------------------------
def post_deltas(company, deltas, *, voucher_no, operation, date, pay_type="", note="",
                client=None, vendor=None):
    """
    Apply each delta through the balance store; every account delta appends one
    ledger row whose last_total_amount is that account's balance right after it.
    Returns {label: new balance}.
    """
    results = {}
    for delta in deltas:
        new_balance = balances.apply_delta(delta.kind, delta.entity, delta.amount)
        results[delta.label] = new_balance
        if delta.kind != balances.ACCOUNT:
            continue
        ledger.append(
            company=company,
            date=date,
            voucher_no=voucher_no,
            operation=operation,
            account=delta.entity,
            direction=RECEIV if delta.amount > 0 else PAYOUT,
            amount=abs(delta.amount),
            last_total_amount=new_balance,
            pay_type=pay_type,
            note=note,
            client=client,
            vendor=vendor,
        )
    return results


def reverse_deltas(deltas):
    """Undo deltas newest first. Returns {label: balance after the undo}."""
    results = {}
    for delta in reversed(deltas):
        results[delta.label] = balances.apply_delta(delta.kind, delta.entity, -delta.amount)
    return results


def remove_entries(company, voucher_no, operation):
    """Delete a posting's ledger rows; zero rows is reported, not raised."""
    removed = ledger.remove(company, voucher_no, operation=operation)
    if removed:
        return []
    message = f"No ledger entries found for voucher {voucher_no}; balances were reversed anyway"
    logger.warning("%s (company %s, %s)", message, company.pk, operation)
    return [message]
