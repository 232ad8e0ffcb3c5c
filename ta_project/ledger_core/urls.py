from django.urls import path

from . import views

app_name = "ledger_core"

urlpatterns = [
    path("advance-returns/", views.advance_return_list, name="advance-return-list"),
    path("advance-returns/<int:pk>/", views.advance_return_detail, name="advance-return-detail"),
    path("balance-transfers/", views.balance_transfer_list, name="balance-transfer-list"),
    path("balance-transfers/<int:pk>/", views.balance_transfer_detail, name="balance-transfer-detail"),
    path("expenses/", views.expense_list, name="expense-list"),
    path("expenses/<int:pk>/", views.expense_detail, name="expense-detail"),
    path("investments/", views.investment_list, name="investment-list"),
    path("investments/<int:pk>/", views.investment_detail, name="investment-detail"),
    path(
        "vendor-advance-returns/",
        views.vendor_advance_return_list,
        name="vendor-advance-return-list",
    ),
    path(
        "vendor-advance-returns/<int:pk>/",
        views.vendor_advance_return_detail,
        name="vendor-advance-return-detail",
    ),
    path("client-payments/", views.client_payment_list, name="client-payment-list"),
    path("client-payments/<int:pk>/", views.client_payment_detail, name="client-payment-detail"),
    path("vendor-payments/", views.vendor_payment_list, name="vendor-payment-list"),
    path("vendor-payments/<int:pk>/", views.vendor_payment_detail, name="vendor-payment-detail"),
    path("reconciliation/", views.reconciliation_view, name="reconciliation"),
]
