"""Assembling a :class:`ProfileSnapshot` from a user's profile page.

A profile fetch costs between one and three HTTP round trips: the profile page
itself, plus two more for the reputation lookup unless it is disabled with
``Config.fetch_reputation``.
"""

import logging
from typing import Callable, Optional, TypeVar
from urllib.parse import parse_qs, urlparse

from bs4 import Tag

from .config import Config
from .errors import FetchError, FieldError, IdentityNotFoundError
from .extractors import (
    extract_bio,
    extract_identity,
    extract_join_date,
    extract_total_posts,
    extract_visitor_messages,
)
from .fetcher import DocumentFetcher
from .models import ProfileSnapshot
from .posts import PostLocator

logger = logging.getLogger(__name__)

T = TypeVar('T')


def user_id_from_url(url: str) -> Optional[str]:
    """Return the ``u`` query parameter of a member.php URL, if numeric."""
    values = parse_qs(urlparse(url).query).get('u')
    if not values or not values[0].isdigit():
        return None
    return values[0]


class ProfileAssembler:
    """Runs the field extractors over a profile page.

    The user name is required; every other field is best-effort and a failure
    there is recorded on the snapshot instead of aborting the fetch.
    """

    def __init__(self, fetcher: DocumentFetcher, locator: Optional[PostLocator] = None,
                 config: Optional[Config] = None):
        self.fetcher = fetcher
        self.config = config or fetcher.config
        self.locator = locator or PostLocator(fetcher, self.config)

    async def fetch_user_profile(self, url: str) -> ProfileSnapshot:
        """Fetch ``url`` and extract a profile snapshot.

        Raises FetchError if the page cannot be fetched and
        IdentityNotFoundError if it has no user name.
        """
        try:
            root = await self.fetcher.fetch(url)
        except FetchError as e:
            raise FetchError.wrap(e, "fetching user profile page") from e

        try:
            identity = extract_identity(root)
        except IdentityNotFoundError as e:
            raise IdentityNotFoundError(f"{url} did not lead to a valid user page: {e}", {'url': url}) from e
        snapshot = ProfileSnapshot(identity=identity, url=url)

        snapshot.join_date = self._extract(snapshot, extract_join_date, root)
        snapshot.total_posts = self._extract(snapshot, extract_total_posts, root)

        if self.config.fetch_reputation:
            snapshot.reputation = await self._fetch_reputation(snapshot, url)

        snapshot.bio_text = self._extract(snapshot, extract_bio, root)
        messages = self._extract(snapshot, extract_visitor_messages, root)
        if messages is not None:
            snapshot.visitor_messages = messages

        if snapshot.degraded:
            logger.info(f"Profile for {identity} is missing {len(snapshot.errors)} field(s): "
                        f"{', '.join(e.field for e in snapshot.errors)}")
        return snapshot

    @staticmethod
    def _extract(snapshot: ProfileSnapshot, extractor: Callable[[Tag], T], root: Tag) -> Optional[T]:
        try:
            return extractor(root)
        except FieldError as e:
            logger.debug(f"Field extraction failed for {snapshot.identity}: {e}")
            snapshot.add_error(e)
            return None

    async def _fetch_reputation(self, snapshot: ProfileSnapshot, url: str) -> Optional[int]:
        user_id = user_id_from_url(url)
        if user_id is None:
            snapshot.add_error(FieldError("reputation", f"no user id in profile url {url}"))
            return None
        try:
            return await self.locator.fetch_reputation(user_id)
        except FieldError as e:
            logger.debug(f"Reputation lookup failed for {snapshot.identity}: {e}")
            snapshot.add_error(e)
            return None
