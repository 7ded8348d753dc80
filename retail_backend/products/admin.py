# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules (ledger-safe stock):

- Product.stock is read-only here. Stock moves only through services
  (sales, returns, PO reception, adjustments, stock takes) so the
  inventory account always follows the physical count.
- Stock take sessions are viewable, not editable.
"""

from django.contrib import admin

from products.models import Category, Product, StockTake, StockTakeItem


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "store", "revenue_account", "cogs_account")
    list_filter = ("store",)
    search_fields = ("name",)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("sku", "name", "category", "price", "cost_price", "stock", "status", "store")
    list_filter = ("status", "store", "category")
    search_fields = ("sku", "name")
    readonly_fields = ("stock", "created_at", "updated_at")


class StockTakeItemInline(admin.TabularInline):
    model = StockTakeItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "name", "sku", "expected", "counted")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(StockTake)
class StockTakeAdmin(admin.ModelAdmin):
    list_display = ("id", "store", "status", "start_time", "end_time")
    list_filter = ("status", "store")
    readonly_fields = ("store", "status", "start_time", "end_time")
    inlines = [StockTakeItemInline]

    def has_add_permission(self, request):
        return False
