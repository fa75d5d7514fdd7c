from django.contrib import admin

from .models import RecurringInvoice


@admin.register(RecurringInvoice)
class RecurringInvoiceAdmin(admin.ModelAdmin):
    list_display = [
        "id", "user", "frequency", "next_invoice_date", "end_date",
        "is_active", "invoices_generated", "last_generated_at",
    ]
    list_filter = ["frequency", "is_active"]
    search_fields = ["user__email", "client__name"]
    readonly_fields = ["invoices_generated", "last_generated_at"]
