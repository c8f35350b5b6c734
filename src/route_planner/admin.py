from django.contrib import admin

from route_planner.models import ChargingStation


@admin.register(ChargingStation)
class ChargingStationAdmin(admin.ModelAdmin):
    list_display = (
        "station_name",
        "city",
        "state",
        "ev_dc_fast_num",
        "max_power_kw",
        "status_code",
        "latitude",
        "longitude",
    )
    list_filter = ("state", "status_code", "facility_type")
    search_fields = ("station_name", "street_address", "city", "state")
    ordering = ("state", "city", "station_name")
