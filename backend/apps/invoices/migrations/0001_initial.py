import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("clients", "0001_initial"),
        ("recurring", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Invoice",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "public_id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Identifier generated when the draft was created",
                        unique=True,
                    ),
                ),
                ("invoice_number", models.CharField(max_length=100)),
                ("date", models.DateField()),
                ("due_date", models.DateField()),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("sent", "Sent"), ("paid", "Paid"), ("overdue", "Overdue")],
                        default="draft",
                        max_length=10,
                    ),
                ),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("company_name", models.CharField(blank=True, max_length=255)),
                ("company_email", models.CharField(blank=True, max_length=255)),
                ("company_phone", models.CharField(blank=True, max_length=50)),
                ("company_address", models.TextField(blank=True)),
                ("company_website", models.CharField(blank=True, max_length=255)),
                ("company_logo_url", models.CharField(blank=True, max_length=2000)),
                ("company_tax_id", models.CharField(blank=True, max_length=50)),
                ("client_name", models.CharField(blank=True, max_length=255)),
                ("client_email", models.CharField(blank=True, max_length=255)),
                ("client_phone", models.CharField(blank=True, max_length=50)),
                ("client_address", models.TextField(blank=True)),
                ("notes", models.TextField(blank=True)),
                ("terms", models.TextField(blank=True)),
                ("subtotal", models.FloatField(default=0)),
                ("tax_rate", models.FloatField(default=0)),
                ("tax_total", models.FloatField(default=0)),
                ("discount", models.FloatField(default=0)),
                ("total", models.FloatField(default=0)),
                (
                    "recurring_sequence",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Occurrence number of the recurring template that produced this invoice",
                        null=True,
                    ),
                ),
                (
                    "client",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="invoices",
                        to="clients.client",
                    ),
                ),
                (
                    "recurring_invoice",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="generated_invoices",
                        to="recurring.recurringinvoice",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="invoice_set",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-date", "-created_at"],
            },
        ),
        migrations.CreateModel(
            name="InvoiceItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("description", models.TextField(blank=True)),
                ("quantity", models.FloatField(default=1)),
                ("rate", models.FloatField(default=0)),
                ("total", models.FloatField(default=0)),
                ("sort_order", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "invoice",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="invoices.invoice",
                    ),
                ),
            ],
            options={
                "ordering": ["sort_order", "id"],
            },
        ),
        migrations.AddConstraint(
            model_name="invoice",
            constraint=models.UniqueConstraint(
                fields=("recurring_invoice", "recurring_sequence"),
                name="unique_recurring_occurrence",
            ),
        ),
    ]
