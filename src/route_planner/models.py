from __future__ import annotations

from django.db import models


class ChargingStation(models.Model):
    objects = models.Manager["ChargingStation"]()

    # Identity from the upstream station dataset
    id = models.IntegerField(primary_key=True)
    station_name = models.CharField(max_length=255)
    street_address = models.CharField(max_length=255, null=True, blank=True)
    city = models.CharField(max_length=100, null=True, blank=True)
    state = models.CharField(max_length=50, null=True, blank=True)
    zip = models.CharField(max_length=20, null=True, blank=True)
    latitude = models.FloatField()
    longitude = models.FloatField()

    # Charging capability
    ev_dc_fast_num = models.IntegerField(default=0, null=True, blank=True)
    ev_connector_types = models.JSONField(default=list, blank=True)
    max_power_kw = models.FloatField(null=True, blank=True)
    facility_type = models.CharField(max_length=50, null=True, blank=True)
    status_code = models.CharField(max_length=5, null=True, blank=True)
    ev_pricing = models.TextField(null=True, blank=True)
    access_days_time = models.TextField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("state", "city", "station_name")
        indexes = (
            models.Index(fields=["state"], name="route_plann_state_7c1e0b_idx"),
            models.Index(fields=["latitude", "longitude"], name="route_plann_latitud_4f2a9d_idx"),
        )

    @property
    def full_address(self) -> str:
        parts = [self.street_address, self.city, self.state, self.zip]
        return ", ".join(part for part in parts if part)

    def __str__(self) -> str:
        return f"{self.station_name} ({self.city}, {self.state})"
