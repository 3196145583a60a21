"""
Aggregation of resolved geolocation records for the analytics dashboard.

Records with an Unknown country or (0, 0) coordinates are dropped first;
percentages are relative to the records that remain.
"""

from typing import Dict, Iterable, List, Tuple

from shortlink_app.schemas.geolocation import (
    CityStats,
    CountryStats,
    GeoAnalytics,
    GeolocationRecord,
    MapPoint,
)


TOP_CITIES = 10


def aggregate(records: Iterable[GeolocationRecord]) -> GeoAnalytics:
    """Build map points, country stats and city stats from geolocation records"""
    located = [record for record in records if record.is_locatable]

    return GeoAnalytics(
        map_points=map_points(located),
        countries_stats=country_stats(located),
        cities_stats=city_stats(located),
    )


def map_points(records: List[GeolocationRecord]) -> List[MapPoint]:
    """One point per exact (lat, lon) pair, weighted by occurrences"""
    points: Dict[Tuple[float, float], MapPoint] = {}
    for record in records:
        key = (record.lat, record.lon)
        if key in points:
            points[key].weight += 1
        else:
            points[key] = MapPoint(lat=record.lat, lon=record.lon, weight=1)
    return list(points.values())


def percentage(count: int, total: int) -> int:
    """count / total as a whole percent, rounding halves up"""
    if total <= 0:
        return 0
    return (count * 200 + total) // (total * 2)


def country_stats(records: List[GeolocationRecord]) -> List[CountryStats]:
    """Visits per country code, most visited first"""
    countries: Dict[str, CountryStats] = {}
    for record in records:
        stats = countries.get(record.country_code)
        if stats:
            stats.count += 1
        else:
            countries[record.country_code] = CountryStats(
                country_code=record.country_code,
                country=record.country,
                count=1,
                percentage=0,
            )

    total = len(records)
    for stats in countries.values():
        stats.percentage = percentage(stats.count, total)

    return sorted(countries.values(), key=lambda s: s.count, reverse=True)


def city_stats(records: List[GeolocationRecord], limit: int = TOP_CITIES) -> List[CityStats]:
    """Top cities by visits; records without a city name are skipped"""
    cities: Dict[Tuple[str, str], CityStats] = {}
    for record in records:
        if not record.city:
            continue

        key = (record.city, record.country_code)
        stats = cities.get(key)
        if stats:
            stats.count += 1
        else:
            cities[key] = CityStats(
                city=record.city,
                country=record.country,
                country_code=record.country_code,
                count=1,
                lat=record.lat,
                lon=record.lon,
            )

    return sorted(cities.values(), key=lambda s: s.count, reverse=True)[:limit]
