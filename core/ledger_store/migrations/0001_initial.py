from django.db import migrations, models


PAYMENT_METHOD_CHOICES = [("Cash", "Cash"), ("Online", "Online")]
BILL_STATUS_CHOICES = [("Paid", "Paid"), ("Pending", "Pending")]


def _tenant_fk(related_name):
    return models.ForeignKey(
        db_column="tenant_id",
        on_delete=models.deletion.PROTECT,
        related_name=related_name,
        to="core_ledger_store.tenant",
    )


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Tenant",
            fields=[
                ("tenant_id", models.UUIDField(editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "ledger_tenants",
                "ordering": ["tenant_id"],
            },
        ),
        migrations.CreateModel(
            name="Brand",
            fields=[
                ("brand_id", models.UUIDField(editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("tenant", _tenant_fk("brands")),
            ],
            options={
                "db_table": "ledger_brands",
                "ordering": ["tenant_id", "name"],
            },
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                ("product_id", models.UUIDField(editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("price", models.DecimalField(decimal_places=2, max_digits=14)),
                ("stock", models.IntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "brand",
                    models.ForeignKey(
                        blank=True,
                        db_column="brand_id",
                        null=True,
                        on_delete=models.deletion.SET_NULL,
                        related_name="products",
                        to="core_ledger_store.brand",
                    ),
                ),
                ("tenant", _tenant_fk("products")),
            ],
            options={
                "db_table": "ledger_products",
                "ordering": ["tenant_id", "name"],
                "indexes": [
                    models.Index(fields=["tenant", "product_id"], name="idx_product_tenant"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Customer",
            fields=[
                ("customer_id", models.UUIDField(editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("phone", models.CharField(blank=True, max_length=64, null=True)),
                ("address", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField()),
                ("tenant", _tenant_fk("customers")),
            ],
            options={
                "db_table": "ledger_customers",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Bill",
            fields=[
                ("bill_id", models.UUIDField(editable=False, primary_key=True, serialize=False)),
                ("invoice_number", models.CharField(max_length=128)),
                ("subtotal", models.DecimalField(decimal_places=2, max_digits=14)),
                ("discount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("total", models.DecimalField(decimal_places=2, max_digits=14)),
                ("payment_method", models.CharField(choices=PAYMENT_METHOD_CHOICES, max_length=16)),
                ("amount_paid", models.DecimalField(decimal_places=2, max_digits=14)),
                ("status", models.CharField(choices=BILL_STATUS_CHOICES, max_length=16)),
                ("created_at", models.DateTimeField()),
                ("updated_at", models.DateTimeField()),
                (
                    "customer",
                    models.ForeignKey(
                        db_column="customer_id",
                        on_delete=models.deletion.PROTECT,
                        related_name="bills",
                        to="core_ledger_store.customer",
                    ),
                ),
                ("tenant", _tenant_fk("bills")),
            ],
            options={
                "db_table": "ledger_bills",
                "ordering": ["-created_at", "-invoice_number"],
                "indexes": [
                    models.Index(fields=["tenant", "created_at"], name="idx_bill_tenant_created"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=["tenant", "invoice_number"],
                        name="uq_bill_tenant_invoice",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="BillLineItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("position", models.PositiveIntegerField()),
                ("product_id", models.UUIDField()),
                ("product_name", models.CharField(blank=True, default="", max_length=255)),
                ("quantity", models.PositiveIntegerField()),
                ("price", models.DecimalField(decimal_places=2, max_digits=14)),
                (
                    "bill",
                    models.ForeignKey(
                        db_column="bill_id",
                        on_delete=models.deletion.CASCADE,
                        related_name="line_items",
                        to="core_ledger_store.bill",
                    ),
                ),
            ],
            options={
                "db_table": "ledger_bill_line_items",
                "ordering": ["bill_id", "position"],
            },
        ),
        migrations.CreateModel(
            name="SequenceCounter",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("year", models.PositiveIntegerField()),
                ("serial", models.PositiveIntegerField(default=0)),
                ("tenant", _tenant_fk("sequence_counters")),
            ],
            options={
                "db_table": "ledger_sequence_counters",
                "constraints": [
                    models.UniqueConstraint(
                        fields=["tenant", "year"],
                        name="uq_sequence_tenant_year",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("notification_id", models.UUIDField(editable=False, unique=True)),
                ("notification_type", models.CharField(max_length=32)),
                ("title", models.CharField(max_length=255)),
                ("message", models.TextField()),
                ("data", models.JSONField(default=dict)),
                ("read", models.BooleanField(default=False)),
                ("event_id", models.UUIDField(blank=True, null=True)),
                ("created_at", models.DateTimeField()),
                ("tenant", _tenant_fk("notifications")),
            ],
            options={
                "db_table": "ledger_notifications",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["tenant", "notification_type"], name="idx_notif_tenant_type"),
                    models.Index(fields=["tenant", "read"], name="idx_notif_tenant_read"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AuditTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("transaction_id", models.UUIDField(editable=False, unique=True)),
                ("event_id", models.UUIDField()),
                ("bill_id", models.UUIDField()),
                ("transaction_type", models.CharField(max_length=32)),
                ("title", models.CharField(max_length=255)),
                ("message", models.TextField()),
                ("metadata", models.JSONField(default=dict)),
                ("occurred_at", models.DateTimeField()),
                ("tenant", _tenant_fk("audit_transactions")),
            ],
            options={
                "db_table": "ledger_audit_transactions",
                "ordering": ["-occurred_at", "-id"],
                "indexes": [
                    models.Index(fields=["tenant", "bill_id"], name="idx_audit_tenant_bill"),
                ],
            },
        ),
    ]
