from django.contrib import admin

from .models import Kunchinittu, Packaging, RiceStockLocation, Warehouse


@admin.register(Warehouse)
class WarehouseAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "location", "capacity", "is_active")
    search_fields = ("name", "code")
    list_filter = ("is_active",)


@admin.register(Kunchinittu)
class KunchinittuAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "warehouse", "variety", "is_active", "is_closed", "closed_on")
    search_fields = ("code", "name", "warehouse__name")
    list_filter = ("is_active", "is_closed", "warehouse")
    autocomplete_fields = ("warehouse",)


@admin.register(Packaging)
class PackagingAdmin(admin.ModelAdmin):
    list_display = ("brand_name", "code", "allotted_kg", "is_active")
    search_fields = ("brand_name", "code")


@admin.register(RiceStockLocation)
class RiceStockLocationAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "is_direct_load", "is_active")
    search_fields = ("code", "name")
