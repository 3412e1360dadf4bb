from django.contrib import admin

from .models import Arrival


@admin.register(Arrival)
class ArrivalAdmin(admin.ModelAdmin):
    list_display = (
        "date",
        "sl_no",
        "movement_type",
        "variety",
        "bags",
        "from_kunchinittu",
        "to_kunchinittu",
        "outturn",
        "status",
    )
    search_fields = ("sl_no", "variety", "broker", "lorry_number")
    list_filter = ("movement_type", "status")
    autocomplete_fields = (
        "to_kunchinittu",
        "to_warehouse",
        "from_kunchinittu",
        "from_warehouse",
        "to_warehouse_shift",
        "outturn",
    )
    date_hierarchy = "date"
