from __future__ import annotations

from route_planner.services.types import CorridorStation, Gap


def compute_gaps(stations: list[CorridorStation], total_miles: float) -> list[Gap]:
    """Uncovered stretches of the route, in travel order.

    ``stations`` must already be sorted by along-route position. N stations give
    N + 1 gaps; with no stations a single gap spans the whole route.
    """
    if not stations:
        return [Gap(start_miles=0.0, end_miles=total_miles)]

    positions = [station.along_route_miles for station in stations]
    boundaries = [0.0, *positions, max(total_miles, positions[-1])]
    return [
        Gap(start_miles=boundaries[index], end_miles=boundaries[index + 1])
        for index in range(len(boundaries) - 1)
    ]


def max_gap_miles(stations: list[CorridorStation], total_miles: float) -> float:
    return max(gap.length_miles for gap in compute_gaps(stations, total_miles))


def largest_gaps(stations: list[CorridorStation], total_miles: float, count: int) -> list[Gap]:
    # sorted() is stable, so equal-length gaps keep travel order
    gaps = compute_gaps(stations, total_miles)
    return sorted(gaps, key=lambda gap: gap.length_miles, reverse=True)[: max(0, count)]
