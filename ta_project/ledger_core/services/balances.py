"""
Balance store: the only code that writes Account.balance, Client.present_balance,
Client.due_amount and the Vendor tagged balance.

Every write re-reads the row under select_for_update() inside the caller's
atomic block, so a delta always lands on the committed value.
"""
import logging
from decimal import Decimal

from django.conf import settings
from django.db import models

from ..exceptions import InsufficientBalance, InvalidRequest, NotFound
from ..models import Account, Client, Vendor

logger = logging.getLogger(__name__)

ACCOUNT = "account"
CLIENT = "client"  # present (advance) balance
CLIENT_DUE = "client_due"
VENDOR = "vendor"  # net advance, signed

# kind -> (model, field written, label used in errors)
_KINDS = {
    ACCOUNT: (Account, "balance", "Account"),
    CLIENT: (Client, "present_balance", "Client"),
    CLIENT_DUE: (Client, "due_amount", "Client"),
    VENDOR: (Vendor, None, "Vendor"),
}


def default_tolerance():
    return Decimal(str(getattr(settings, "LEDGER_BALANCE_TOLERANCE", "0.0001")))


def _kind_info(kind):
    try:
        return _KINDS[kind]
    except KeyError:
        raise InvalidRequest(f"Unknown balance kind: {kind}") from None


def _pk(entity):
    return entity.pk if isinstance(entity, models.Model) else entity


def _lock(kind, entity):
    model, _field, label = _kind_info(kind)
    pk = _pk(entity)
    try:
        return model.objects.select_for_update().get(pk=pk)
    except model.DoesNotExist:
        raise NotFound.for_model(label, pk) from None


def _value(kind, row):
    _model, field, _label = _kind_info(kind)
    if kind == VENDOR:
        return row.signed_balance
    return getattr(row, field)


def read_balance(kind, entity) -> Decimal:
    """Current signed balance (vendors: advance positive, due negative)."""
    model, _field, label = _kind_info(kind)
    pk = _pk(entity)
    try:
        row = model.objects.get(pk=pk)
    except model.DoesNotExist:
        raise NotFound.for_model(label, pk) from None
    return _value(kind, row)


def apply_delta(kind, entity, delta) -> Decimal:
    """
    Add a signed delta to one balance and return the new value.
    When `entity` is a model instance its in-memory fields are refreshed too.
    """
    delta = Decimal(delta)
    row = _lock(kind, entity)
    new_value = _value(kind, row) + delta

    if kind == VENDOR:
        # tag only re-derived here, never carried through arithmetic
        row.set_signed_balance(new_value)
        update_fields = ["present_balance_type", "present_balance_amount", "updated_at"]
    elif kind == ACCOUNT:
        row.balance = new_value
        row.has_transactions = True
        update_fields = ["balance", "has_transactions", "updated_at"]
    else:
        _model, field, _label = _kind_info(kind)
        setattr(row, field, new_value)
        update_fields = [field, "updated_at"]

    row.save(update_fields=update_fields)

    if isinstance(entity, models.Model):
        for name in update_fields:
            setattr(entity, name, getattr(row, name))

    logger.debug("%s %s balance %+s -> %s", kind, row.pk, delta, new_value)
    return new_value


def ensure_covers(kind, entity, amount, tolerance=None):
    """
    Raise InsufficientBalance when debiting `amount` would push the advance
    pool below -tolerance. Reads under lock so the check and the later write
    see the same value.
    """
    if tolerance is None:
        tolerance = default_tolerance()
    row = _lock(kind, entity)
    available = _value(kind, row)
    if available - Decimal(amount) < -tolerance:
        _model, _field, label = _kind_info(kind)
        raise InsufficientBalance.for_entity(label, row.pk, amount, available)
    return available


def locked_balance(kind, entity) -> Decimal:
    """Current value with the row locked until the caller's atomic block ends."""
    return _value(kind, _lock(kind, entity))
