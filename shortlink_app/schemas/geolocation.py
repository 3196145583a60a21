"""
Geolocation schemas.

GeolocationRecord mirrors the provider's JSON shape (camelCase aliases),
so provider responses and cached entries validate with the same model.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


UNKNOWN_COUNTRY = "Unknown"
UNKNOWN_COUNTRY_CODE = "UN"


class GeolocationRecord(BaseModel):
    country: str
    country_code: str = Field(..., alias="countryCode")
    region: str = ""
    region_name: str = Field("", alias="regionName")
    city: str = ""
    zip: str = ""
    lat: float
    lon: float
    timezone: str = ""
    isp: str = ""
    org: str = ""
    as_: str = Field("", alias="as")
    query: str = ""

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def unknown(cls, ip: str) -> "GeolocationRecord":
        """Sentinel used when resolution is skipped or fails"""
        return cls(
            country=UNKNOWN_COUNTRY,
            country_code=UNKNOWN_COUNTRY_CODE,
            lat=0,
            lon=0,
            query=ip,
        )

    @property
    def is_locatable(self) -> bool:
        return self.country != UNKNOWN_COUNTRY and not (self.lat == 0 and self.lon == 0)


class MapPoint(BaseModel):
    lat: float
    lon: float
    weight: int


class CountryStats(BaseModel):
    country_code: str
    country: str
    count: int
    percentage: int


class CityStats(BaseModel):
    city: str
    country: str
    country_code: str
    count: int
    lat: float
    lon: float


class GeoAnalytics(BaseModel):
    map_points: List[MapPoint] = []
    countries_stats: List[CountryStats] = []
    cities_stats: List[CityStats] = []
