from django.contrib import admin

from .models import ByProduct, Outturn, RiceProduction, RiceStockMovement


@admin.register(Outturn)
class OutturnAdmin(admin.ModelAdmin):
    list_display = ("code", "allotted_variety", "type", "is_cleared", "cleared_on", "remaining_bags", "yield_percentage")
    search_fields = ("code", "allotted_variety")
    list_filter = ("type", "is_cleared")
    readonly_fields = ("cleared_at", "cleared_by", "remaining_bags", "yield_percentage")


@admin.register(RiceProduction)
class RiceProductionAdmin(admin.ModelAdmin):
    list_display = (
        "date",
        "outturn",
        "product_type",
        "quantity_quintals",
        "packaging",
        "bags",
        "paddy_bags_deducted",
        "movement_type",
        "status",
    )
    search_fields = ("outturn__code", "location_code", "lorry_number", "bill_number")
    list_filter = ("product_type", "movement_type", "status")
    autocomplete_fields = ("outturn", "packaging")
    readonly_fields = ("paddy_bags_deducted",)
    date_hierarchy = "date"


@admin.register(ByProduct)
class ByProductAdmin(admin.ModelAdmin):
    list_display = ("date", "outturn", "rice", "broken", "bran", "faram")
    search_fields = ("outturn__code",)
    autocomplete_fields = ("outturn",)
    date_hierarchy = "date"


@admin.register(RiceStockMovement)
class RiceStockMovementAdmin(admin.ModelAdmin):
    list_display = (
        "date",
        "movement_type",
        "variety",
        "product_type",
        "location_code",
        "packaging",
        "bags",
        "quantity_quintals",
        "target_packaging",
        "target_bags",
        "approval_status",
    )
    search_fields = ("variety", "location_code", "party_name", "bill_number")
    list_filter = ("movement_type", "product_type", "approval_status")
    autocomplete_fields = ("packaging", "target_packaging")
    readonly_fields = ("conversion_shortage_kg",)
    date_hierarchy = "date"
