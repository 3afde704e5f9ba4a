from .client import ForumClient
from .config import Config
from .errors import (
    FetchError,
    FieldError,
    ForumWatchError,
    IdentityNotFoundError,
    PostNotFoundError,
    QuerySyntaxError,
)
from .fetcher import DocumentFetcher
from .models import LatestPost, MonitorState, PollState, PostReference, ProfileSnapshot, VisitorMessage
from .monitor import PollingHandle, PostCountMonitor, start_polling
from .posts import PostLocator
from .profile import ProfileAssembler

__all__ = [
    'ForumClient',
    'Config',
    'DocumentFetcher',
    'ProfileAssembler',
    'PostLocator',
    'PostCountMonitor',
    'PollingHandle',
    'start_polling',
    'ProfileSnapshot',
    'VisitorMessage',
    'PostReference',
    'LatestPost',
    'PollState',
    'MonitorState',
    'ForumWatchError',
    'FetchError',
    'FieldError',
    'IdentityNotFoundError',
    'PostNotFoundError',
    'QuerySyntaxError',
]
