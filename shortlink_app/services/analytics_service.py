import asyncio
import logging

from shortlink_app.exceptions import AnalyticsError, ShortenerError
from shortlink_app.geolocation.aggregation import aggregate
from shortlink_app.geolocation.resolver import GeolocationResolver
from shortlink_app.schemas.analytics import AnalyticsSnapshot, RecentVisit, VisitGeolocation
from shortlink_app.schemas.geolocation import UNKNOWN_COUNTRY
from shortlink_app.storage.strategies import LinkStoreStrategy, VisitStoreStrategy


logger = logging.getLogger(__name__)


class AnalyticsService:
    """
    Builds an AnalyticsSnapshot for one link, on demand.

    The distinct IPs among the last `visit_window` visits are geolocated
    concurrently; the resolved visits feed the
    unique counts and geo rollups; only `recent_visits` of them are returned.
    The total comes from the link's click counter and the time series
    from the daily histogram, both independent of the sample.
    """

    def __init__(
        self,
        link_store: LinkStoreStrategy,
        visit_store: VisitStoreStrategy,
        resolver: GeolocationResolver,
        visit_window: int = 20,
        recent_visits: int = 5,
        days: int = 7,
    ):
        self.link_store = link_store
        self.visit_store = visit_store
        self.resolver = resolver
        self.visit_window = visit_window
        self.recent_visits = recent_visits
        self.days = days

    async def get_analytics(self, short_code: str) -> AnalyticsSnapshot:
        """
        Raises:
            LinkNotFoundError, AnalyticsError
        """
        try:
            link = await self.link_store.find_by_code(short_code)

            # Independent reads, joined before anything is computed
            visits, time_series = await asyncio.gather(
                self.visit_store.find_recent(link.id, self.visit_window),
                self.visit_store.count_per_day(link.id, self.days),
            )

            # One lookup per distinct IP; resolve() never raises, so one
            # slow/failed lookup cannot abort the join
            ips = list(dict.fromkeys(visit.visitor_ip for visit in visits))
            resolved = await asyncio.gather(*(self.resolver.resolve(ip) for ip in ips))
            by_ip = dict(zip(ips, resolved))
            geolocations = [by_ip[visit.visitor_ip] for visit in visits]

            enriched = [
                RecentVisit(
                    ip=visit.visitor_ip,
                    visited_at=visit.visited_at,
                    geolocation=VisitGeolocation(
                        country=geo.country,
                        country_code=geo.country_code,
                        city=geo.city,
                        region_name=geo.region_name,
                        lat=geo.lat,
                        lon=geo.lon,
                    ),
                )
                for visit, geo in zip(visits, geolocations)
            ]

            unique_countries = len({geo.country for geo in geolocations if geo.country != UNKNOWN_COUNTRY})
            unique_cities = len({geo.city for geo in geolocations if geo.city})

            geo_analytics = aggregate(geolocations)

            return AnalyticsSnapshot(
                visit_count=link.click_count,
                recent_visits=enriched[:self.recent_visits],
                unique_countries=unique_countries,
                unique_cities=unique_cities,
                map_points=geo_analytics.map_points,
                countries_stats=geo_analytics.countries_stats,
                cities_stats=geo_analytics.cities_stats,
                time_series_data=time_series,
            )

        except ShortenerError:
            raise
        except Exception as e:
            logger.exception("Failed to build analytics for %s", short_code)
            raise AnalyticsError("Failed to get URL analytics") from e
