"""
Retail Ledger Django adapter URL routing.
Fixed paths are listed before the <bill_id> / <notification_id> routes.
"""

from django.urls import path

from adapters.django_api import views


urlpatterns = [
    path("bills", views.bills_view),
    path("bills/customers", views.customers_view),
    path("bills/reports", views.sales_report_view),
    path("bills/dashboard/totals", views.dashboard_totals_view),
    path("bills/count", views.bill_count_view),
    path("bills/<str:bill_id>", views.bill_detail_view),
    path("notifications", views.notifications_view),
    path("notifications/unread/count", views.notifications_unread_count_view),
    path("notifications/read-all", views.notifications_read_all_view),
    path("notifications/type/<str:notification_type>", views.notifications_by_type_view),
    path("notifications/<str:notification_id>/read", views.notification_read_view),
    path("notifications/<str:notification_id>", views.notification_detail_view),
    path("transactions", views.transactions_view),
    path("transactions/bill/<str:bill_id>", views.bill_transactions_view),
]
