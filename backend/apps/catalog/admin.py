from django.contrib import admin

from .models import CatalogItem


@admin.register(CatalogItem)
class CatalogItemAdmin(admin.ModelAdmin):
    list_display = ["name", "rate", "unit", "category", "is_active", "user"]
    list_filter = ["is_active", "category"]
    search_fields = ["name", "description"]
