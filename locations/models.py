from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Warehouse(TimeStampedModel):
    name = models.CharField(max_length=100)
    code = models.CharField(max_length=20, unique=True)
    location = models.CharField(max_length=200, blank=True)
    capacity = models.PositiveIntegerField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        verbose_name = "Warehouse"
        verbose_name_plural = "Warehouses"
        ordering = ("name",)

    def __str__(self) -> str:
        return self.name


class Kunchinittu(TimeStampedModel):
    """A storage yard: a named cluster of bags inside one warehouse."""

    name = models.CharField(max_length=100, unique=True)
    code = models.CharField(max_length=20, unique=True)
    warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.PROTECT,
        related_name="kunchinittus",
    )
    variety = models.CharField(max_length=100, blank=True)
    capacity = models.PositiveIntegerField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    is_closed = models.BooleanField(default=False)
    closed_on = models.DateField(null=True, blank=True)
    closed_remaining_bags = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = "Kunchinittu"
        verbose_name_plural = "Kunchinittus"
        ordering = ("code",)

    def __str__(self) -> str:
        return f"{self.code} - {self.warehouse}"

    def clean(self) -> None:
        super().clean()
        if self.is_closed and not self.closed_on:
            raise ValidationError("A closed kunchinittu needs its closing date.")
        if not self.is_closed:
            self.closed_on = None
            self.closed_remaining_bags = 0


class Packaging(TimeStampedModel):
    brand_name = models.CharField(max_length=100)
    code = models.CharField(max_length=20, unique=True)
    allotted_kg = models.DecimalField(max_digits=7, decimal_places=2, default=Decimal("26.00"))
    is_active = models.BooleanField(default=True)

    class Meta:
        verbose_name = "Packaging"
        verbose_name_plural = "Packagings"
        ordering = ("brand_name", "allotted_kg")

    def __str__(self) -> str:
        return f"{self.brand_name} {Decimal(self.allotted_kg).normalize():f}kg"


class RiceStockLocation(TimeStampedModel):
    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=100, blank=True)
    is_direct_load = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    class Meta:
        verbose_name = "Rice stock location"
        verbose_name_plural = "Rice stock locations"
        ordering = ("code",)

    def __str__(self) -> str:
        return self.name or self.code
