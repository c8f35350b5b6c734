from __future__ import annotations

from pathlib import Path
from typing import Any

import polars as pl
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from route_planner.models import ChargingStation

TEXT_COLUMNS = (
    "station_name",
    "street_address",
    "city",
    "state",
    "zip",
    "facility_type",
    "status_code",
    "ev_pricing",
    "access_days_time",
)
UPDATE_FIELDS = [
    *TEXT_COLUMNS,
    "latitude",
    "longitude",
    "ev_dc_fast_num",
    "ev_connector_types",
    "max_power_kw",
]


class Command(BaseCommand):
    help = "Import charging stations from a CSV export using Polars."

    def add_arguments(self, parser: Any) -> None:
        parser.add_argument(
            "--csv-path",
            type=str,
            default=str(settings.PROJECT_ROOT / "stations.csv"),
            help="Path to the station export CSV",
        )
        parser.add_argument(
            "--replace",
            action="store_true",
            help="Delete existing stations before importing",
        )

    def handle(self, *_: Any, **options: Any) -> None:
        csv_path = Path(options["csv_path"])
        if not csv_path.exists():
            raise CommandError(f"CSV file does not exist: {csv_path}")

        frame = self._load_and_transform(csv_path)
        records = frame.to_dicts()

        if options["replace"]:
            ChargingStation.objects.all().delete()

        existing = {
            station.id: station
            for station in ChargingStation.objects.filter(id__in=[row["id"] for row in records])
        }

        to_create: list[ChargingStation] = []
        to_update: list[ChargingStation] = []

        for row in records:
            values = {field: row[field] for field in UPDATE_FIELDS}
            station = existing.get(row["id"])
            if station is None:
                to_create.append(ChargingStation(id=row["id"], **values))
                continue

            for field, value in values.items():
                setattr(station, field, value)
            to_update.append(station)

        if to_create:
            ChargingStation.objects.bulk_create(to_create, batch_size=1000)
        if to_update:
            ChargingStation.objects.bulk_update(to_update, UPDATE_FIELDS, batch_size=1000)

        self.stdout.write(
            self.style.SUCCESS(
                "Imported charging stations: "
                + (
                    f"{len(records)} rows normalized, "
                    f"{len(to_create)} created, {len(to_update)} updated"
                )
            )
        )

    @staticmethod
    def _load_and_transform(csv_path: Path) -> pl.DataFrame:
        frame = pl.read_csv(csv_path, infer_schema_length=5000)
        required_columns = {"id", "station_name", "latitude", "longitude", "ev_dc_fast_num"}
        missing_columns = required_columns.difference(frame.columns)
        if missing_columns:
            raise CommandError(f"Missing expected columns: {sorted(missing_columns)}")

        for column in (*TEXT_COLUMNS, "ev_connector_types", "max_power_kw"):
            if column not in frame.columns:
                frame = frame.with_columns(pl.lit(None).alias(column))

        def text(column: str) -> pl.Expr:
            stripped = pl.col(column).cast(pl.Utf8, strict=False).str.strip_chars()
            return (
                pl.when(stripped.str.len_chars() > 0).then(stripped).otherwise(None).alias(column)
            )

        normalized = (
            frame.select(
                pl.col("id").cast(pl.Int64, strict=False).alias("id"),
                *(text(column) for column in TEXT_COLUMNS),
                pl.col("latitude").cast(pl.Float64, strict=False).alias("latitude"),
                pl.col("longitude").cast(pl.Float64, strict=False).alias("longitude"),
                pl.col("ev_dc_fast_num")
                .cast(pl.Int64, strict=False)
                .fill_null(0)
                .alias("ev_dc_fast_num"),
                pl.col("ev_connector_types")
                .cast(pl.Utf8, strict=False)
                .fill_null("")
                .str.to_uppercase()
                .str.split("|")
                .list.eval(pl.element().str.strip_chars())
                .list.eval(pl.element().filter(pl.element().str.len_chars() > 0))
                .alias("ev_connector_types"),
                pl.col("max_power_kw").cast(pl.Float64, strict=False).alias("max_power_kw"),
            )
            .filter(
                pl.col("id").is_not_null()
                & pl.col("latitude").is_not_null()
                & pl.col("longitude").is_not_null()
                & pl.col("latitude").is_between(-90.0, 90.0)
                & pl.col("longitude").is_between(-180.0, 180.0)
            )
            .with_columns(pl.col("station_name").fill_null(pl.format("Station {}", pl.col("id"))))
            .unique(subset=["id"], keep="last", maintain_order=True)
        )

        return normalized
