from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from locations.models import Kunchinittu, TimeStampedModel, Warehouse


class ApprovalStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


class Arrival(TimeStampedModel):
    """One paddy movement: a purchase, a loose entry or a shift of bags."""

    class MovementType(models.TextChoices):
        PURCHASE = "purchase", "Purchase"
        SHIFTING = "shifting", "Shifting"
        PRODUCTION_SHIFTING = "production-shifting", "Production shifting"
        LOOSE = "loose", "Loose"

    sl_no = models.CharField(max_length=20, unique=True)
    date = models.DateField()
    movement_type = models.CharField(max_length=24, choices=MovementType.choices)
    broker = models.CharField(max_length=100, blank=True)
    variety = models.CharField(max_length=100, blank=True)
    bags = models.PositiveIntegerField(default=0)
    from_location = models.CharField(max_length=100, blank=True)
    to_kunchinittu = models.ForeignKey(
        Kunchinittu,
        on_delete=models.PROTECT,
        related_name="arrivals_in",
        null=True,
        blank=True,
    )
    to_warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.PROTECT,
        related_name="arrivals_in",
        null=True,
        blank=True,
    )
    from_kunchinittu = models.ForeignKey(
        Kunchinittu,
        on_delete=models.PROTECT,
        related_name="arrivals_out",
        null=True,
        blank=True,
    )
    from_warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.PROTECT,
        related_name="arrivals_out",
        null=True,
        blank=True,
    )
    to_warehouse_shift = models.ForeignKey(
        Warehouse,
        on_delete=models.PROTECT,
        related_name="shifts_in",
        null=True,
        blank=True,
    )
    outturn = models.ForeignKey(
        "milling.Outturn",
        on_delete=models.PROTECT,
        related_name="arrivals",
        null=True,
        blank=True,
    )
    net_weight = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    lorry_number = models.CharField(max_length=20, blank=True)
    status = models.CharField(max_length=12, choices=ApprovalStatus.choices, default=ApprovalStatus.PENDING)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="arrivals_created",
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="arrivals_approved",
    )
    remarks = models.TextField(blank=True)

    class Meta:
        verbose_name = "Arrival"
        verbose_name_plural = "Arrivals"
        ordering = ("-date", "-created_at")
        indexes = [
            models.Index(fields=("date", "movement_type"), name="arrival_date_type_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.sl_no} · {self.get_movement_type_display()} · {self.bags} bags"

    def clean(self) -> None:
        super().clean()
        if self.movement_type == self.MovementType.SHIFTING:
            if not (self.from_kunchinittu and self.to_kunchinittu):
                raise ValidationError("A shifting needs both the source and destination kunchinittu.")
        elif self.movement_type == self.MovementType.PRODUCTION_SHIFTING:
            if not self.from_kunchinittu:
                raise ValidationError("A production shifting needs the source kunchinittu.")
            if not self.outturn:
                raise ValidationError("A production shifting needs the destination outturn.")
        if self.outturn and self.outturn.is_cleared and self.outturn.cleared_on and self.date > self.outturn.cleared_on:
            raise ValidationError("The outturn was cleared before this date.")
