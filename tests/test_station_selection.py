from __future__ import annotations

import pytest

from factories import station, station_at_mile, straight_route
from route_planner.models import ChargingStation
from route_planner.services.geo import METERS_PER_MILE
from route_planner.services.station_dataset import DjangoStationDataset, InMemoryStationDataset
from route_planner.services.station_selection import StationSelector

ROUTE_METERS = 100.0 * METERS_PER_MILE


def _select(stations, corridor_miles: float = 15.0):
    selector = StationSelector(InMemoryStationDataset(stations))
    return selector.select_corridor_stations(
        geometry=straight_route(100.0),
        route_distance_meters=ROUTE_METERS,
        corridor_miles=corridor_miles,
    )


def test_neighbor_distances_follow_along_route_order() -> None:
    result = _select(
        [station_at_mile(3, 90.0), station_at_mile(1, 20.0), station_at_mile(2, 55.0)]
    )

    assert [item.station.station_id for item in result.stations] == [1, 2, 3]
    assert [item.along_route_miles for item in result.stations] == pytest.approx([20, 55, 90])
    assert [item.miles_from_prev for item in result.stations] == pytest.approx([20, 35, 35])
    assert [item.miles_to_next for item in result.stations] == pytest.approx([35, 35, 10])
    assert all(item.lateral_miles == pytest.approx(0.5, rel=0.01) for item in result.stations)
    assert result.degraded is False


def test_stations_without_fast_chargers_are_discarded() -> None:
    result = _select(
        [
            station_at_mile(1, 20.0, fast_chargers=0),
            station_at_mile(2, 40.0, fast_chargers=None),
            station_at_mile(3, 60.0, max_power_kw=None),
        ]
    )

    assert [item.station.station_id for item in result.stations] == [3]
    assert result.stations[0].miles_from_prev == pytest.approx(60.0)
    assert result.stations[0].miles_to_next == pytest.approx(40.0)


def test_stations_outside_corridor_are_discarded() -> None:
    result = _select(
        [station_at_mile(1, 30.0, offset_miles=4.0), station_at_mile(2, 70.0, offset_miles=6.0)],
        corridor_miles=5.0,
    )

    assert [item.station.station_id for item in result.stations] == [1]


def test_short_geometry_yields_no_stations() -> None:
    selector = StationSelector(InMemoryStationDataset([station(1, 0.0, 0.0)]))

    result = selector.select_corridor_stations([(0.0, 0.0)], 1_000.0, 10.0)
    degenerate = selector.select_corridor_stations([(0.0, 0.0), (0.0, 0.0)], 1_000.0, 10.0)

    assert result.stations == []
    assert degenerate.stations == []


def _create_station(station_id: int, mile: float, fast: int = 2) -> ChargingStation:
    return ChargingStation.objects.create(
        id=station_id,
        station_name=f"Station {station_id}",
        latitude=0.25 / 69.0,
        longitude=mile / 69.0,
        ev_dc_fast_num=fast,
        ev_connector_types=["CCS"],
        max_power_kw=None,
    )


@pytest.mark.django_db
def test_django_dataset_falls_back_to_bounding_box() -> None:
    _create_station(1, 25.0)
    _create_station(2, 75.0, fast=0)
    ChargingStation.objects.create(
        id=3, station_name="Far away", latitude=10.0, longitude=10.0, ev_dc_fast_num=4
    )

    selector = StationSelector(DjangoStationDataset(use_geodesic_query=True))
    result = selector.select_corridor_stations(straight_route(100.0), ROUTE_METERS, 15.0)

    assert result.degraded is True
    assert [item.station.station_id for item in result.stations] == [1]
    assert result.stations[0].station.max_power_kw is None
    assert result.stations[0].station.connector_types == ("CCS",)
    # the outer transaction is still usable after the failed geodesic query
    assert ChargingStation.objects.count() == 3


@pytest.mark.django_db
def test_django_dataset_uses_geodesic_query_when_available(mocker) -> None:
    record = station_at_mile(7, 42.0)
    geodesic = mocker.patch.object(
        DjangoStationDataset, "_stations_within_line_distance", return_value=[record]
    )

    selector = StationSelector(DjangoStationDataset(use_geodesic_query=True))
    result = selector.select_corridor_stations(straight_route(100.0), ROUTE_METERS, 15.0)

    geodesic.assert_called_once()
    assert result.degraded is False
    assert [item.station.station_id for item in result.stations] == [7]


@pytest.mark.django_db
def test_django_dataset_point_query_uses_great_circle_radius() -> None:
    _create_station(1, 10.0)
    _create_station(2, 50.0)

    dataset = DjangoStationDataset(use_geodesic_query=False)
    nearby = dataset.stations_near_point(station(0, 0.0, 0.0).point, radius_miles=20.0)

    assert [record.station_id for record in nearby] == [1]
