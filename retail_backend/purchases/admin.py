# purchases/admin.py

from django.contrib import admin

from purchases.models import (
    PurchaseOrder,
    PurchaseOrderItem,
    Supplier,
    SupplierInvoice,
    SupplierPayment,
)


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("name", "contact_person", "phone", "email", "is_active", "store")
    list_filter = ("is_active", "store")
    search_fields = ("name", "contact_person", "email")


class PurchaseOrderItemInline(admin.TabularInline):
    model = PurchaseOrderItem
    extra = 0
    readonly_fields = ("received_quantity",)


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    """
    Receiving goes through purchases.services.receiving_service so stock
    and the ledger move together; status / received_at are read-only here.
    """

    list_display = ("po_number", "supplier", "status", "total", "ordered_at", "received_at", "store")
    list_filter = ("status", "store")
    search_fields = ("po_number", "supplier__name")
    readonly_fields = ("status", "received_at", "created_at")
    inlines = [PurchaseOrderItemInline]


@admin.register(SupplierInvoice)
class SupplierInvoiceAdmin(admin.ModelAdmin):
    list_display = ("invoice_number", "supplier", "amount", "amount_paid", "status", "due_date")
    list_filter = ("status", "store")
    search_fields = ("invoice_number", "supplier__name")
    readonly_fields = ("amount_paid", "status", "created_at")


@admin.register(SupplierPayment)
class SupplierPaymentAdmin(admin.ModelAdmin):
    list_display = ("invoice", "date", "amount", "method", "reference")
    search_fields = ("invoice__invoice_number", "reference")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
