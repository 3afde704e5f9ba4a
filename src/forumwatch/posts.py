"""Locating a user's posts through the forum's "find all posts" search.

Both lookups here take two round trips: the search listing for the user, then
the thread page the first listed post links to.
"""

import logging
from typing import Optional

from bs4 import Tag

from .config import Config
from .errors import FetchError, FieldError, PostNotFoundError
from .extractors import REPUTATION_PREFIX, parse_count
from .fetcher import DocumentFetcher
from .models import LatestPost, PostReference
from .query import Query, escape

logger = logging.getLogger(__name__)

LISTING_REFERENCE_QUERY = Query.compile('td.alt1 > div.alt2 > div > em > a[href]', attribute='href')
LATEST_LINK_QUERY = Query.compile('em > a[href]')

POST_MESSAGE_PREFIX = "post_message_"


def reputation_query(fragment: str) -> Query:
    """Query for the reputation line in the post table anchored at ``fragment``."""
    return Query.compile(
        f'table#{escape(fragment)} tr[valign="top"] > td.alt2 > * > '
        f':-soup-contains-own("{REPUTATION_PREFIX}")'
    )


def post_message_query(post_id: str) -> Query:
    return Query.compile(f'div#{escape(POST_MESSAGE_PREFIX + post_id)}')


class PostLocator:
    """Follows a user's post listing to the posts themselves."""

    def __init__(self, fetcher: DocumentFetcher, config: Optional[Config] = None):
        self.fetcher = fetcher
        self.config = config or fetcher.config

    async def fetch_reputation(self, user_id: str) -> int:
        """Read the user's reputation from the sidebar of their latest post.

        Any failure along the way raises a single FieldError.
        """
        try:
            root = await self.fetcher.fetch(self.config.post_search_url(user_id))
        except FetchError as e:
            raise FieldError("reputation", f"cannot get user's posts: {e}") from e

        href, found = LISTING_REFERENCE_QUERY.string_value(root)
        if not found:
            raise FieldError("reputation", "cannot get user posts")

        try:
            reference = PostReference.parse(href, self.config.base_url)
        except ValueError as e:
            raise FieldError("reputation", f"malformed post reference: {e}") from e

        try:
            root = await self.fetcher.fetch(reference.url)
        except FetchError as e:
            raise FieldError("reputation", f"cannot get user's post in a topic: {e}") from e

        return self._read_reputation(root, reference)

    def _read_reputation(self, root: Tag, reference: PostReference) -> int:
        value, found = reputation_query(reference.fragment).string_value(root)
        if not found:
            raise FieldError("reputation", f"cannot get reputation field from post {reference.fragment}")
        try:
            return parse_count(value, REPUTATION_PREFIX)
        except ValueError as e:
            raise FieldError("reputation", f"cannot convert reputation to integer: {value.strip()!r}") from e

    async def fetch_latest_post(self, user_id: str) -> LatestPost:
        """Return the title and full message of the user's most recent post.

        All-or-nothing: raises PostNotFoundError if any piece is missing and
        FetchError if a page cannot be fetched.
        """
        try:
            root = await self.fetcher.fetch(self.config.post_search_url(user_id))
        except FetchError as e:
            raise FetchError.wrap(e, "fetching user's post listing") from e

        link = LATEST_LINK_QUERY.first(root)
        if link is None:
            raise PostNotFoundError("cannot get user posts", {'user_id': user_id})
        title = link.get_text()
        href = link['href']

        try:
            reference = PostReference.parse(href, self.config.base_url)
            post_id = reference.post_id
        except ValueError as e:
            raise PostNotFoundError(f"cannot locate post from reference {href!r}",
                                    {'user_id': user_id}) from e

        try:
            root = await self.fetcher.fetch(reference.url)
        except FetchError as e:
            raise FetchError.wrap(e, "fetching referenced post page") from e

        message, found = post_message_query(post_id).string_value(root)
        if not found:
            raise PostNotFoundError(f"cannot get the post {post_id}",
                                    {'user_id': user_id, 'url': reference.url})

        logger.debug(f"Found latest post {post_id} for user {user_id}")
        return LatestPost(title=title.strip(), body=message.strip(), url=reference.url)
