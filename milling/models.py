from __future__ import annotations

from decimal import Decimal
from typing import Any

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from arrivals.models import ApprovalStatus
from locations.models import Packaging, TimeStampedModel
from stock.services.events import paddy_bags_deducted


class Outturn(TimeStampedModel):
    """A production batch: paddy committed to milling under one code."""

    class Type(models.TextChoices):
        RAW = "raw", "Raw"
        STEAM = "steam", "Steam"

    code = models.CharField(max_length=20, unique=True)
    allotted_variety = models.CharField(max_length=100)
    type = models.CharField(max_length=10, choices=Type.choices, default=Type.RAW)
    is_cleared = models.BooleanField(default=False)
    cleared_on = models.DateField(null=True, blank=True)
    cleared_at = models.DateTimeField(null=True, blank=True)
    cleared_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="outturns_cleared",
    )
    remaining_bags = models.PositiveIntegerField(default=0)
    yield_percentage = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal("0.00"))
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="outturns_created",
    )

    class Meta:
        verbose_name = "Outturn"
        verbose_name_plural = "Outturns"
        ordering = ("-created_at",)

    def __str__(self) -> str:
        return f"{self.code} · {self.allotted_variety}"


class ProductType(models.TextChoices):
    RICE = "Rice", "Rice"
    BRAN = "Bran", "Bran"
    FARM_BRAN = "Farm Bran", "Farm Bran"
    REJECTION_RICE = "Rejection Rice", "Rejection Rice"
    SIZER_BROKEN = "Sizer Broken", "Sizer Broken"
    REJECTION_BROKEN = "Rejection Broken", "Rejection Broken"
    BROKEN = "Broken", "Broken"
    ZERO_BROKEN = "Zero Broken", "Zero Broken"
    FARAM = "Faram", "Faram"
    UNPOLISHED = "Unpolished", "Unpolished"
    RJ_RICE_1 = "RJ Rice 1", "RJ Rice 1"
    RJ_RICE_2 = "RJ Rice 2", "RJ Rice 2"


class RiceProduction(TimeStampedModel):
    class MovementType(models.TextChoices):
        KUNCHINITTU = "kunchinittu", "Stored"
        LOADING = "loading", "Direct loading"

    outturn = models.ForeignKey(
        Outturn,
        on_delete=models.PROTECT,
        related_name="rice_productions",
    )
    date = models.DateField()
    product_type = models.CharField(max_length=20, choices=ProductType.choices)
    quantity_quintals = models.DecimalField(max_digits=10, decimal_places=2)
    packaging = models.ForeignKey(
        Packaging,
        on_delete=models.PROTECT,
        related_name="rice_productions",
        null=True,
        blank=True,
    )
    bags = models.PositiveIntegerField(default=0)
    paddy_bags_deducted = models.PositiveIntegerField(default=0)
    movement_type = models.CharField(max_length=12, choices=MovementType.choices, default=MovementType.KUNCHINITTU)
    location_code = models.CharField(max_length=20, blank=True)
    lorry_number = models.CharField(max_length=20, blank=True)
    bill_number = models.CharField(max_length=30, blank=True)
    status = models.CharField(max_length=12, choices=ApprovalStatus.choices, default=ApprovalStatus.PENDING)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="rice_productions_created",
    )

    class Meta:
        verbose_name = "Rice production"
        verbose_name_plural = "Rice productions"
        ordering = ("-date", "-created_at")

    def __str__(self) -> str:
        return f"{self.outturn.code} · {self.product_type} · {self.quantity_quintals} qtl"

    def clean(self) -> None:
        super().clean()
        if self.movement_type == self.MovementType.KUNCHINITTU and not self.location_code:
            raise ValidationError("Stored production needs the rice stock location.")
        if self.movement_type == self.MovementType.LOADING and not self.lorry_number:
            raise ValidationError("Direct loading needs the lorry number.")

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.paddy_bags_deducted = paddy_bags_deducted(self.quantity_quintals, self.product_type)
        if self.packaging_id and not self.bags:
            kg = self.packaging.allotted_kg
            if kg:
                self.bags = int(Decimal(self.quantity_quintals) * 100 // kg)
        super().save(*args, **kwargs)


class ByProduct(TimeStampedModel):
    """Daily by-product quantities (quintals) recorded against an outturn."""

    outturn = models.ForeignKey(
        Outturn,
        on_delete=models.CASCADE,
        related_name="by_products",
    )
    date = models.DateField()
    rice = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    rejection_rice = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    rj_rice_1 = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    rj_rice_2 = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    broken = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    rejection_broken = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    zero_broken = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    sizer_broken = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    faram = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    bran = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    unpolished = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="by_products_created",
    )

    class Meta:
        verbose_name = "By-product entry"
        verbose_name_plural = "By-product entries"
        ordering = ("-date",)
        unique_together = ("outturn", "date")

    def __str__(self) -> str:
        return f"{self.outturn.code} · {self.date:%d/%m/%Y}"


class RiceStockMovement(TimeStampedModel):
    class MovementType(models.TextChoices):
        PURCHASE = "purchase", "Purchase"
        SALE = "sale", "Sale"
        PALTI = "palti", "Palti"

    date = models.DateField()
    movement_type = models.CharField(max_length=10, choices=MovementType.choices)
    variety = models.CharField(max_length=100)
    product_type = models.CharField(max_length=20, choices=ProductType.choices, default=ProductType.RICE)
    location_code = models.CharField(max_length=20)
    packaging = models.ForeignKey(
        Packaging,
        on_delete=models.PROTECT,
        related_name="rice_stock_movements",
        null=True,
        blank=True,
        help_text="Packaging sold or purchased; the source packaging for a palti.",
    )
    bags = models.PositiveIntegerField(default=0)
    quantity_quintals = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    target_packaging = models.ForeignKey(
        Packaging,
        on_delete=models.PROTECT,
        related_name="palti_targets",
        null=True,
        blank=True,
    )
    target_bags = models.PositiveIntegerField(default=0)
    conversion_shortage_kg = models.DecimalField(max_digits=10, decimal_places=3, default=Decimal("0.000"))
    party_name = models.CharField(max_length=120, blank=True)
    bill_number = models.CharField(max_length=30, blank=True)
    approval_status = models.CharField(
        max_length=12,
        choices=ApprovalStatus.choices,
        default=ApprovalStatus.PENDING,
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="rice_stock_movements_created",
    )

    class Meta:
        verbose_name = "Rice stock movement"
        verbose_name_plural = "Rice stock movements"
        ordering = ("-date", "-created_at")

    def __str__(self) -> str:
        return f"{self.get_movement_type_display()} · {self.variety} · {self.bags} bags"

    def clean(self) -> None:
        super().clean()
        if not self.packaging_id:
            raise ValidationError("Select the packaging for this movement.")
        if self.movement_type == self.MovementType.PALTI:
            if not self.target_packaging_id:
                raise ValidationError("A palti needs the target packaging.")
            if self.target_packaging_id == self.packaging_id:
                raise ValidationError("Source and target packaging must differ.")

    def save(self, *args: Any, **kwargs: Any) -> None:
        if self.packaging_id and not self.quantity_quintals:
            self.quantity_quintals = Decimal(self.bags) * self.packaging.allotted_kg / 100
        if self.movement_type == self.MovementType.PALTI and self.packaging_id and self.target_packaging_id:
            source_kg = Decimal(self.bags) * self.packaging.allotted_kg
            target_kg = Decimal(self.target_bags) * self.target_packaging.allotted_kg
            self.conversion_shortage_kg = max(source_kg - target_kg, Decimal("0"))
        super().save(*args, **kwargs)
