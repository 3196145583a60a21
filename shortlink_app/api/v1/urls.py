from fastapi import APIRouter, Depends, status
from shortlink_app.api.v1.errors import to_http_exception
from shortlink_app.dependencies import get_url_service, get_analytics_service
from shortlink_app.exceptions import ShortenerError
from shortlink_app.schemas.analytics import AnalyticsSnapshot
from shortlink_app.schemas.url import URLCreate, URLCreatedResponse, URLInfo
from shortlink_app.services.analytics_service import AnalyticsService
from shortlink_app.services.url_service import URLService

router = APIRouter(prefix="/urls", tags=["urls"])


@router.post("/", response_model=URLCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_short_url(
    url_data: URLCreate,
    url_service: URLService = Depends(get_url_service)
):
    """Create a new short URL (optionally with alias and expiration)"""
    try:
        short_url = await url_service.create_short_url(
            str(url_data.original_url),
            alias=url_data.alias,
            expires_at=url_data.expires_at,
        )
    except ShortenerError as e:
        raise to_http_exception(e)
    return URLCreatedResponse(short_url=short_url)


@router.get("/{short_code}", response_model=URLInfo)
async def get_url_info(
    short_code: str,
    url_service: URLService = Depends(get_url_service)
):
    """Get information about a short URL (does not count as a visit)"""
    try:
        link = await url_service.get_url_info(short_code)
    except ShortenerError as e:
        raise to_http_exception(e)
    return URLInfo.from_link(link, url_service.build_short_url(link.short_code))


@router.get("/{short_code}/analytics", response_model=AnalyticsSnapshot)
async def get_url_analytics(
    short_code: str,
    analytics_service: AnalyticsService = Depends(get_analytics_service)
):
    """Visit count, recent visits, geo rollups and the daily time series"""
    try:
        return await analytics_service.get_analytics(short_code)
    except ShortenerError as e:
        raise to_http_exception(e)


@router.delete("/{short_code}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_url(
    short_code: str,
    url_service: URLService = Depends(get_url_service)
):
    """Delete a short URL and its visit history"""
    try:
        await url_service.delete_url(short_code)
    except ShortenerError as e:
        raise to_http_exception(e)
