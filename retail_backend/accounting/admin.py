# accounting/admin.py

from django.contrib import admin

from accounting.models.account import Account
from accounting.models.journal import JournalEntry, JournalEntryLine

# ============================================================
# ACCOUNT
# ============================================================


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = (
        "number",
        "name",
        "account_type",
        "sub_type",
        "balance",
        "store",
    )
    list_filter = ("account_type", "sub_type", "store")
    search_fields = ("number", "name")
    ordering = ("store", "number")
    readonly_fields = ("is_debit_normal", "balance", "created_at", "updated_at")

    fieldsets = (
        (
            "Account Identity",
            {
                "fields": ("store", "number", "name", "account_type", "sub_type", "description"),
            },
        ),
        (
            "Ledger",
            {
                "fields": ("is_debit_normal", "balance"),
            },
        ),
        (
            "System Fields",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )


# ============================================================
# JOURNAL ENTRY (READ-ONLY)
# ============================================================


class JournalEntryLineInline(admin.TabularInline):
    model = JournalEntryLine
    extra = 0
    can_delete = False
    readonly_fields = ("account", "account_name", "entry_type", "amount")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(JournalEntry)
class JournalEntryAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "store",
        "description",
        "source_type",
        "source_id",
        "date",
    )
    list_filter = ("source_type", "store", "date")
    search_fields = ("description", "source_id")
    ordering = ("-date",)
    inlines = [JournalEntryLineInline]

    readonly_fields = (
        "store",
        "date",
        "description",
        "source_type",
        "source_id",
        "created_at",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
