"""
Exceptions raised by the shortener core.

The HTTP layer maps them to status codes:
- LinkNotFoundError -> 404
- DuplicateCodeError, InvalidExpirationError, InvalidAliasError -> 400
- AnalyticsError -> 500
"""


class ShortenerError(Exception):
    """Generic base class for shortener exceptions."""

    pass


class LinkNotFoundError(ShortenerError):
    """Short code is absent, or treated as absent because the link expired."""

    def __init__(self, short_code: str):
        super().__init__(f'URL with short code "{short_code}" not found')
        self.short_code = short_code


class DuplicateCodeError(ShortenerError):
    """Short code or alias is already in use (unique constraint violated)."""

    def __init__(self, short_code: str):
        super().__init__(f'Short code "{short_code}" is already in use')
        self.short_code = short_code


class InvalidExpirationError(ShortenerError):
    """Expiration date is in the past at creation time."""

    pass


class InvalidAliasError(ShortenerError):
    """Alias does not match the allowed charset or length."""

    pass


class AnalyticsError(ShortenerError):
    """Catch-all for persistence or aggregation failures not otherwise classified."""

    pass
