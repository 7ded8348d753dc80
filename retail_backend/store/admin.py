# store/admin.py

from django.contrib import admin

from store.models import Store, StoreMembership


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "code")


@admin.register(StoreMembership)
class StoreMembershipAdmin(admin.ModelAdmin):
    list_display = ("store", "user", "is_active", "created_at")
    list_filter = ("is_active", "store")
    raw_id_fields = ("user",)
