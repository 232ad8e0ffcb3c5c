from typing import Optional

from ..models import AuditLog, Company


def log_action(
    *,
    action: str,
    instance,
    user=None,
    company: Optional[Company] = None,
    balance_before=None,
    balance_after=None,
    changes: dict | None = None,
):
    """
    Central audit logger.
    Runs inside the caller's atomic block, so the row rolls back with the posting.
    """

    if not company:
        company = getattr(instance, "company", None)

    # automated callers (tasks, commands) log anonymously
    if user is not None and not getattr(user, "is_authenticated", False):
        user = None

    return AuditLog.objects.create(
        company=company,
        user=user,
        action=action,
        object_type=instance.__class__.__name__,
        object_id=str(instance.pk),
        balance_before=balance_before,
        balance_after=balance_after,
        changes=changes,
    )
