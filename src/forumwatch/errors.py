"""Exceptions raised while fetching and extracting forum pages."""

from typing import Optional


class ForumWatchError(Exception):
    """Base exception for forumwatch."""

    def __init__(self, message: str, context: dict = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class FetchError(ForumWatchError):
    """A page could not be fetched (transport failure or non-2xx status)."""

    def __init__(self, message: str, url: Optional[str] = None,
                 status: Optional[int] = None, context: dict = None):
        context = dict(context or {})
        context.setdefault('url', url)
        context.setdefault('status', status)
        super().__init__(message, context)
        self.url = url
        self.status = status

    @classmethod
    def wrap(cls, error: Exception, stage: str) -> 'FetchError':
        """Prefix an error with the stage that failed, keeping the cause.

        Use as ``raise FetchError.wrap(e, "fetching x") from e``.
        """
        url = getattr(error, 'url', None)
        status = getattr(error, 'status', None)
        return cls(f"{stage}: {error}", url=url, status=status)


class QuerySyntaxError(ForumWatchError):
    """A tree-query expression could not be compiled."""


class IdentityNotFoundError(ForumWatchError):
    """The page has no user name anchor, so it is not a profile page."""


class PostNotFoundError(ForumWatchError):
    """A stage of the latest-post lookup found nothing."""


class FieldError(ForumWatchError):
    """A single optional profile field could not be extracted."""

    def __init__(self, field: str, message: str):
        super().__init__(message, {'field': field})
        self.field = field

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"

    def __eq__(self, other) -> bool:
        if not isinstance(other, FieldError):
            return NotImplemented
        return (self.field, self.message) == (other.field, other.message)

    def __hash__(self) -> int:
        return hash((self.field, self.message))
