from django.contrib import admin

from .models import Invoice, InvoiceItem


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    readonly_fields = ["total"]


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ["invoice_number", "client_name", "date", "due_date", "status", "currency", "total", "user"]
    list_filter = ["status", "currency"]
    search_fields = ["invoice_number", "client_name", "client_email"]
    readonly_fields = ["public_id", "subtotal", "tax_total", "total", "recurring_invoice", "recurring_sequence"]
    inlines = [InvoiceItemInline]
