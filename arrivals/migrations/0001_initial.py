from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("locations", "0001_initial"),
        ("milling", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Arrival",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("sl_no", models.CharField(max_length=20, unique=True)),
                ("date", models.DateField()),
                (
                    "movement_type",
                    models.CharField(
                        choices=[
                            ("purchase", "Purchase"),
                            ("shifting", "Shifting"),
                            ("production-shifting", "Production shifting"),
                            ("loose", "Loose"),
                        ],
                        max_length=24,
                    ),
                ),
                ("broker", models.CharField(blank=True, max_length=100)),
                ("variety", models.CharField(blank=True, max_length=100)),
                ("bags", models.PositiveIntegerField(default=0)),
                ("from_location", models.CharField(blank=True, max_length=100)),
                ("net_weight", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("lorry_number", models.CharField(blank=True, max_length=20)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")],
                        default="pending",
                        max_length=12,
                    ),
                ),
                ("remarks", models.TextField(blank=True)),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="arrivals_approved",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="arrivals_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "from_kunchinittu",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="arrivals_out",
                        to="locations.kunchinittu",
                    ),
                ),
                (
                    "from_warehouse",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="arrivals_out",
                        to="locations.warehouse",
                    ),
                ),
                (
                    "outturn",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="arrivals",
                        to="milling.outturn",
                    ),
                ),
                (
                    "to_kunchinittu",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="arrivals_in",
                        to="locations.kunchinittu",
                    ),
                ),
                (
                    "to_warehouse",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="arrivals_in",
                        to="locations.warehouse",
                    ),
                ),
                (
                    "to_warehouse_shift",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="shifts_in",
                        to="locations.warehouse",
                    ),
                ),
            ],
            options={
                "verbose_name": "Arrival",
                "verbose_name_plural": "Arrivals",
                "ordering": ("-date", "-created_at"),
                "indexes": [models.Index(fields=["date", "movement_type"], name="arrival_date_type_idx")],
            },
        ),
    ]
