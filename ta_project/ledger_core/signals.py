from django.core.exceptions import ValidationError
from django.db.models.signals import pre_delete, pre_save
from django.dispatch import receiver

from .models import Account, LedgerEntry

"""Block deletion if the account has ever carried a posting."""


# pre_delete fires just before Django deletes the instance
@receiver(pre_delete, sender=Account)
def prevent_delete_account_with_transactions(sender, instance, **kwargs):
    if instance.has_transactions or LedgerEntry.objects.filter(account=instance).exists():
        raise ValidationError("Cannot delete an account that has transactions.")


"""Balances move only through the balance store (update_fields=...);
a full save of an existing account must not overwrite them."""


@receiver(pre_save, sender=Account)
def keep_account_balance_out_of_full_saves(sender, instance, update_fields=None, **kwargs):
    if instance._state.adding or update_fields is not None:
        return
    stored = (
        Account.objects.filter(pk=instance.pk)
        .values_list("balance", "has_transactions")
        .first()
    )
    if stored is None:
        return
    # keep the committed values, whatever the form posted
    instance.balance, instance.has_transactions = stored
