import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task  # register this function as a Celery task
def reconcile_client_balances(company_id):
    """Run the client due reconciliation for one company (manual trigger)."""
    # import lazily to avoid circular imports at module import time
    from .models import Company
    from .services.reconciliation import ReconciliationChecker

    company = Company.objects.get(pk=company_id)
    summary = ReconciliationChecker(company).reconcile()
    logger.info(
        "Reconciliation for company %s: %s/%s clients corrected, %s errors",
        company.pk, summary["reconciled_clients"], summary["total_clients"],
        len(summary["errors"]),
    )
    return summary
