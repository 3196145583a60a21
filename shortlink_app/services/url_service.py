import logging
from datetime import datetime
from typing import Optional

from shortlink_app.exceptions import (
    AnalyticsError,
    DuplicateCodeError,
    InvalidAliasError,
    InvalidExpirationError,
    LinkNotFoundError,
    ShortenerError,
)
from shortlink_app.models import Link
from shortlink_app.services.short_code_strategies import (
    ShortCodeStrategy,
    is_reserved_code,
    is_valid_alias,
)
from shortlink_app.storage.strategies import LinkStoreStrategy, VisitStoreStrategy
from shortlink_app.utils.time import to_naive_utc, utcnow


logger = logging.getLogger(__name__)


class URLService:
    """
    Link lifecycle: create, redirect (resolve + expire + log), info, delete.

    Collaborators are injected (see dependencies.py), so tests can pass
    their own stores or generator.

    Error policy:
    - validation errors are raised before anything is persisted
    - best-effort steps (click count, expired-link delete) are logged, never raised
    - unexpected failures surface as AnalyticsError
    """

    def __init__(
        self,
        link_store: LinkStoreStrategy,
        visit_store: VisitStoreStrategy,
        short_code_strategy: ShortCodeStrategy,
        base_url: str,
        max_retries: int = 5,
    ):
        """
        Args:
            link_store: Persistence for links
            visit_store: Persistence for visits
            short_code_strategy: Generator used when no alias is given
            base_url: Prefix of every short URL
            max_retries: Attempts for generated codes that hit a collision
        """
        self.link_store = link_store
        self.visit_store = visit_store
        self.short_code_strategy = short_code_strategy
        self.base_url = base_url.rstrip("/")
        self.max_retries = max(1, max_retries)

    def build_short_url(self, short_code: str) -> str:
        return f"{self.base_url}/{short_code}"

    async def create_short_url(
        self,
        original_url: str,
        alias: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> str:
        """Create a new short URL

        Process:
        1. Reject a malformed or reserved alias, or a past expiration date
        2. Use the alias as short code, or generate one
        3. Insert; a generated code that collides is regenerated
        4. Return <base_url>/<short_code>

        Raises:
            InvalidAliasError, InvalidExpirationError, DuplicateCodeError, AnalyticsError
        """
        if alias is not None and not is_valid_alias(alias):
            raise InvalidAliasError(
                "Custom alias must be 1-20 characters: letters, numbers, underscores and hyphens"
            )
        if alias is not None and is_reserved_code(alias):
            raise InvalidAliasError(f'Custom alias "{alias}" is reserved')

        expires_at = to_naive_utc(expires_at)
        if expires_at is not None and expires_at < utcnow():
            raise InvalidExpirationError("Expiration date cannot be in the past")

        attempts = 1 if alias else self.max_retries
        try:
            for attempt in range(1, attempts + 1):
                short_code = alias or self.short_code_strategy.generate()
                if not alias and is_reserved_code(short_code):
                    continue
                try:
                    await self.link_store.create(
                        original_url=original_url,
                        short_code=short_code,
                        alias=alias,
                        expires_at=expires_at,
                    )
                except DuplicateCodeError:
                    if alias or attempt == attempts:
                        raise
                    logger.warning(
                        "Generated short code %s already exists (attempt %d/%d)",
                        short_code, attempt, attempts,
                    )
                    continue

                logger.info("Created short code %s for %s", short_code, original_url)
                return self.build_short_url(short_code)

            # Only reached when the last generated code was reserved
            raise DuplicateCodeError(short_code)

        except ShortenerError:
            raise
        except Exception as e:
            logger.exception("Failed to create short URL for %s", original_url)
            raise AnalyticsError("Failed to create short URL") from e

    async def resolve_and_log(self, short_code: str, visitor_ip: str) -> Link:
        """
        Redirect path: look up the link, record the visit, bump the counter.

        An expired link is deleted on the spot and reported as not found,
        exactly like a link that never existed.

        Raises:
            LinkNotFoundError, AnalyticsError
        """
        logger.info("Looking up short code: %s", short_code)
        try:
            link = await self.link_store.find_by_code(short_code)

            if link.expires_at is not None and link.expires_at < utcnow():
                logger.info("URL with short code %s has expired, deleting it", short_code)
                await self._delete_expired_link(short_code)
                raise LinkNotFoundError(short_code)

            logger.debug("Logging visit for %s", short_code)
            await self.visit_store.create(link_id=link.id, visitor_ip=visitor_ip)

            # Visit row is written first; the counter is best-effort
            try:
                await self.link_store.increment_click_count(short_code)
            except Exception as e:
                logger.error("Failed to increment click count for %s: %s", short_code, e)

            logger.info("Successfully processed redirect for %s", short_code)
            return link

        except ShortenerError:
            raise
        except Exception as e:
            logger.exception("Error retrieving URL for %s", short_code)
            raise AnalyticsError("Failed to get original URL") from e

    async def _delete_expired_link(self, short_code: str) -> None:
        try:
            await self.link_store.delete_by_code(short_code)
        except Exception as e:
            logger.error("Failed to delete expired URL with code %s: %s", short_code, e)

    async def get_url_info(self, short_code: str) -> Link:
        """Read-only lookup (no visit recorded, no expiry handling)"""
        try:
            return await self.link_store.find_by_code(short_code)
        except ShortenerError:
            raise
        except Exception as e:
            raise AnalyticsError("Failed to get URL information") from e

    async def delete_url(self, short_code: str) -> None:
        """Delete a short URL together with its visits"""
        try:
            await self.link_store.delete_by_code(short_code)
        except ShortenerError:
            raise
        except Exception as e:
            raise AnalyticsError("Failed to delete URL") from e
        logger.info("Deleted short code %s", short_code)

    async def cleanup_expired(self) -> int:
        """Bulk-delete expired links; meant to be scheduled externally"""
        try:
            deleted = await self.link_store.delete_expired()
        except Exception as e:
            raise AnalyticsError("Failed to delete expired URLs") from e
        logger.info("Deleted %d expired URLs", deleted)
        return deleted
