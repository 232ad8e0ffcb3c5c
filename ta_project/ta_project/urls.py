from django.urls import include, path

urlpatterns = [
    path("api/ledger/", include("ledger_core.urls")),
]
