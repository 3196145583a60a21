from datetime import datetime
from typing import List

from pydantic import BaseModel

from shortlink_app.schemas.geolocation import MapPoint, CountryStats, CityStats


class VisitGeolocation(BaseModel):
    country: str
    country_code: str
    city: str
    region_name: str
    lat: float
    lon: float


class RecentVisit(BaseModel):
    ip: str
    visited_at: datetime
    geolocation: VisitGeolocation


class DailyVisitCount(BaseModel):
    date: str  # YYYY-MM-DD, UTC
    count: int


class AnalyticsSnapshot(BaseModel):
    """Computed on every request; never stored"""
    visit_count: int
    recent_visits: List[RecentVisit]
    unique_countries: int
    unique_cities: int
    map_points: List[MapPoint]
    countries_stats: List[CountryStats]
    cities_stats: List[CityStats]
    time_series_data: List[DailyVisitCount]
