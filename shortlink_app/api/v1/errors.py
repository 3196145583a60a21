"""Translate core exceptions into HTTP errors."""

from fastapi import HTTPException, status

from shortlink_app.exceptions import (
    DuplicateCodeError,
    InvalidAliasError,
    InvalidExpirationError,
    LinkNotFoundError,
    ShortenerError,
)


def to_http_exception(error: ShortenerError) -> HTTPException:
    if isinstance(error, LinkNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, (DuplicateCodeError, InvalidExpirationError, InvalidAliasError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
