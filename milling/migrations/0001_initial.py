from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion

PRODUCT_TYPES = [
    ("Rice", "Rice"),
    ("Bran", "Bran"),
    ("Farm Bran", "Farm Bran"),
    ("Rejection Rice", "Rejection Rice"),
    ("Sizer Broken", "Sizer Broken"),
    ("Rejection Broken", "Rejection Broken"),
    ("Broken", "Broken"),
    ("Zero Broken", "Zero Broken"),
    ("Faram", "Faram"),
    ("Unpolished", "Unpolished"),
    ("RJ Rice 1", "RJ Rice 1"),
    ("RJ Rice 2", "RJ Rice 2"),
]

APPROVAL_STATUSES = [("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")]


def quintals_field():
    return models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("locations", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Outturn",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("code", models.CharField(max_length=20, unique=True)),
                ("allotted_variety", models.CharField(max_length=100)),
                (
                    "type",
                    models.CharField(choices=[("raw", "Raw"), ("steam", "Steam")], default="raw", max_length=10),
                ),
                ("is_cleared", models.BooleanField(default=False)),
                ("cleared_on", models.DateField(blank=True, null=True)),
                ("cleared_at", models.DateTimeField(blank=True, null=True)),
                ("remaining_bags", models.PositiveIntegerField(default=0)),
                ("yield_percentage", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=6)),
                (
                    "cleared_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="outturns_cleared",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="outturns_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Outturn",
                "verbose_name_plural": "Outturns",
                "ordering": ("-created_at",),
            },
        ),
        migrations.CreateModel(
            name="RiceProduction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("date", models.DateField()),
                ("product_type", models.CharField(choices=PRODUCT_TYPES, max_length=20)),
                ("quantity_quintals", models.DecimalField(decimal_places=2, max_digits=10)),
                ("bags", models.PositiveIntegerField(default=0)),
                ("paddy_bags_deducted", models.PositiveIntegerField(default=0)),
                (
                    "movement_type",
                    models.CharField(
                        choices=[("kunchinittu", "Stored"), ("loading", "Direct loading")],
                        default="kunchinittu",
                        max_length=12,
                    ),
                ),
                ("location_code", models.CharField(blank=True, max_length=20)),
                ("lorry_number", models.CharField(blank=True, max_length=20)),
                ("bill_number", models.CharField(blank=True, max_length=30)),
                ("status", models.CharField(choices=APPROVAL_STATUSES, default="pending", max_length=12)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="rice_productions_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "outturn",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="rice_productions",
                        to="milling.outturn",
                    ),
                ),
                (
                    "packaging",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="rice_productions",
                        to="locations.packaging",
                    ),
                ),
            ],
            options={
                "verbose_name": "Rice production",
                "verbose_name_plural": "Rice productions",
                "ordering": ("-date", "-created_at"),
            },
        ),
        migrations.CreateModel(
            name="ByProduct",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("date", models.DateField()),
                ("rice", quintals_field()),
                ("rejection_rice", quintals_field()),
                ("rj_rice_1", quintals_field()),
                ("rj_rice_2", quintals_field()),
                ("broken", quintals_field()),
                ("rejection_broken", quintals_field()),
                ("zero_broken", quintals_field()),
                ("sizer_broken", quintals_field()),
                ("faram", quintals_field()),
                ("bran", quintals_field()),
                ("unpolished", quintals_field()),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="by_products_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "outturn",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="by_products",
                        to="milling.outturn",
                    ),
                ),
            ],
            options={
                "verbose_name": "By-product entry",
                "verbose_name_plural": "By-product entries",
                "ordering": ("-date",),
                "unique_together": {("outturn", "date")},
            },
        ),
        migrations.CreateModel(
            name="RiceStockMovement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("date", models.DateField()),
                (
                    "movement_type",
                    models.CharField(
                        choices=[("purchase", "Purchase"), ("sale", "Sale"), ("palti", "Palti")],
                        max_length=10,
                    ),
                ),
                ("variety", models.CharField(max_length=100)),
                ("product_type", models.CharField(choices=PRODUCT_TYPES, default="Rice", max_length=20)),
                ("location_code", models.CharField(max_length=20)),
                ("bags", models.PositiveIntegerField(default=0)),
                ("quantity_quintals", quintals_field()),
                ("target_bags", models.PositiveIntegerField(default=0)),
                (
                    "conversion_shortage_kg",
                    models.DecimalField(decimal_places=3, default=Decimal("0.000"), max_digits=10),
                ),
                ("party_name", models.CharField(blank=True, max_length=120)),
                ("bill_number", models.CharField(blank=True, max_length=30)),
                ("approval_status", models.CharField(choices=APPROVAL_STATUSES, default="pending", max_length=12)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="rice_stock_movements_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "packaging",
                    models.ForeignKey(
                        blank=True,
                        help_text="Packaging sold or purchased; the source packaging for a palti.",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="rice_stock_movements",
                        to="locations.packaging",
                    ),
                ),
                (
                    "target_packaging",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="palti_targets",
                        to="locations.packaging",
                    ),
                ),
            ],
            options={
                "verbose_name": "Rice stock movement",
                "verbose_name_plural": "Rice stock movements",
                "ordering": ("-date", "-created_at"),
            },
        ),
    ]
