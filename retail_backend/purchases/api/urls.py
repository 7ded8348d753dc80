# purchases/api/urls.py

from django.urls import path

from purchases.api.views import (
    PurchaseOrderListCreateView,
    PurchaseOrderReceiveView,
    SupplierInvoiceListCreateView,
    SupplierInvoicePaymentView,
    SupplierListCreateView,
)

urlpatterns = [
    path("suppliers/", SupplierListCreateView.as_view(), name="purchase-suppliers"),
    path("orders/", PurchaseOrderListCreateView.as_view(), name="purchase-orders"),
    path(
        "orders/<uuid:order_id>/receive/",
        PurchaseOrderReceiveView.as_view(),
        name="purchase-order-receive",
    ),
    path(
        "invoices/", SupplierInvoiceListCreateView.as_view(), name="supplier-invoices"
    ),
    path(
        "invoices/<uuid:invoice_id>/payments/",
        SupplierInvoicePaymentView.as_view(),
        name="supplier-invoice-payments",
    ),
]
