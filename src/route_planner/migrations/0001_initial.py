from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ChargingStation",
            fields=[
                ("id", models.IntegerField(primary_key=True, serialize=False)),
                ("station_name", models.CharField(max_length=255)),
                ("street_address", models.CharField(blank=True, max_length=255, null=True)),
                ("city", models.CharField(blank=True, max_length=100, null=True)),
                ("state", models.CharField(blank=True, max_length=50, null=True)),
                ("zip", models.CharField(blank=True, max_length=20, null=True)),
                ("latitude", models.FloatField()),
                ("longitude", models.FloatField()),
                ("ev_dc_fast_num", models.IntegerField(blank=True, default=0, null=True)),
                ("ev_connector_types", models.JSONField(blank=True, default=list)),
                ("max_power_kw", models.FloatField(blank=True, null=True)),
                ("facility_type", models.CharField(blank=True, max_length=50, null=True)),
                ("status_code", models.CharField(blank=True, max_length=5, null=True)),
                ("ev_pricing", models.TextField(blank=True, null=True)),
                ("access_days_time", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ("state", "city", "station_name"),
                "indexes": [
                    models.Index(fields=["state"], name="route_plann_state_7c1e0b_idx"),
                    models.Index(
                        fields=["latitude", "longitude"], name="route_plann_latitud_4f2a9d_idx"
                    ),
                ],
            },
        ),
    ]
