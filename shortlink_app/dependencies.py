"""
FastAPI dependencies.

Every core component is constructed explicitly here, with its collaborators
passed as constructor arguments. `@lru_cache` makes each one a process-wide
singleton; tests replace them through `app.dependency_overrides`.
"""

from functools import lru_cache

from shortlink_app.cache.factory import CacheFactory, CacheBackend
from shortlink_app.cache.strategies import CacheStrategy
from shortlink_app.config import settings
from shortlink_app.database.connection import SessionLocal
from shortlink_app.geolocation.resolver import GeolocationResolver
from shortlink_app.services.analytics_service import AnalyticsService
from shortlink_app.services.short_code_factory import ShortCodeFactory
from shortlink_app.services.url_service import URLService
from shortlink_app.storage.strategies import (
    LinkStoreStrategy,
    VisitStoreStrategy,
    SQLAlchemyLinkStore,
    SQLAlchemyVisitStore,
)


@lru_cache()
def get_cache() -> CacheStrategy:
    """Cache instance (singleton) selected by settings.cache_backend"""
    backend = CacheBackend(settings.cache_backend)
    return CacheFactory.create(backend)


@lru_cache()
def get_link_store() -> LinkStoreStrategy:
    return SQLAlchemyLinkStore(SessionLocal)


@lru_cache()
def get_visit_store() -> VisitStoreStrategy:
    return SQLAlchemyVisitStore(SessionLocal)


@lru_cache()
def get_geolocation_resolver() -> GeolocationResolver:
    return GeolocationResolver(
        cache=get_cache(),
        api_url=settings.geolocation_api_url,
        timeout=settings.geolocation_timeout,
        cache_ttl=settings.geolocation_cache_ttl,
    )


@lru_cache()
def get_url_service() -> URLService:
    """
    URLService with all dependencies injected.

    Controller depends on service; service depends on stores and generator.
    """
    return URLService(
        link_store=get_link_store(),
        visit_store=get_visit_store(),
        short_code_strategy=ShortCodeFactory.create_strategy(),
        base_url=settings.base_url,
        max_retries=settings.max_retries,
    )


@lru_cache()
def get_analytics_service() -> AnalyticsService:
    return AnalyticsService(
        link_store=get_link_store(),
        visit_store=get_visit_store(),
        resolver=get_geolocation_resolver(),
        visit_window=settings.analytics_visit_window,
        recent_visits=settings.analytics_recent_visits,
        days=settings.analytics_days,
    )
