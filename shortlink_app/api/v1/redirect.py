from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse
from shortlink_app.api.v1.errors import to_http_exception
from shortlink_app.dependencies import get_url_service
from shortlink_app.exceptions import ShortenerError
from shortlink_app.services.url_service import URLService

router = APIRouter(tags=["redirect"])

UNKNOWN_CLIENT_IP = "0.0.0.0"


@router.get("/{short_code}")
async def redirect_to_original_url(
    short_code: str,
    request: Request,
    url_service: URLService = Depends(get_url_service)
):
    """
    Redirect to the original URL.

    The visit is recorded before the response is sent; expired links
    answer 404 and are deleted as a side effect.
    """
    visitor_ip = request.client.host if request.client else UNKNOWN_CLIENT_IP

    try:
        link = await url_service.resolve_and_log(short_code, visitor_ip)
    except ShortenerError as e:
        raise to_http_exception(e)

    return RedirectResponse(url=link.original_url, status_code=status.HTTP_302_FOUND)
