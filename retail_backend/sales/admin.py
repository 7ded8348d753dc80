# sales/admin.py

"""
Sales admin is read-only for financial rows.

Sales, payments and returns are created by services only, so stock,
customer balances and the ledger always move together.
"""

from django.contrib import admin

from sales.models import Customer, Payment, Return, ReturnItem, Sale, SaleItem


class ReadOnlyAdminMixin:
    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("name", "email", "phone", "store_credit", "account_balance", "store")
    list_filter = ("store",)
    search_fields = ("name", "email", "phone")
    readonly_fields = ("store_credit", "account_balance", "created_at")


class SaleItemInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = SaleItem
    extra = 0
    fields = ("product", "quantity", "price_at_sale", "cost_at_sale", "returned_quantity")
    readonly_fields = fields


class PaymentInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = Payment
    extra = 0
    fields = ("date", "amount", "method")
    readonly_fields = fields


@admin.register(Sale)
class SaleAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "transaction_id",
        "timestamp",
        "customer",
        "total",
        "payment_status",
        "amount_paid",
        "refund_status",
        "store",
    )
    list_filter = ("payment_status", "refund_status", "store")
    search_fields = ("transaction_id", "customer__name")
    date_hierarchy = "timestamp"
    inlines = [SaleItemInline, PaymentInline]


class ReturnItemInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = ReturnItem
    extra = 0
    fields = ("product", "sale_item", "quantity", "reason", "add_to_stock")
    readonly_fields = fields


@admin.register(Return)
class ReturnAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("sale", "timestamp", "refund_amount", "refund_method", "store")
    list_filter = ("refund_method", "store")
    search_fields = ("sale__transaction_id",)
    inlines = [ReturnItemInline]
