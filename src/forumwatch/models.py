from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import urldefrag, urljoin

from .errors import FieldError

POST_FRAGMENT_PREFIX = "post"


@dataclass
class VisitorMessage:
    """A single visitor message left on a user's profile."""
    author: str
    body: str

    def to_dict(self) -> Dict[str, str]:
        return {'author': self.author, 'body': self.body}


@dataclass
class ProfileSnapshot:
    """Facts extracted from one fetch of a user's profile page.

    Only ``identity`` is guaranteed. Every other field is ``None`` when it
    could not be extracted, and each such failure appears once in ``errors``.
    """
    identity: str
    url: Optional[str] = None
    join_date: Optional[str] = None
    total_posts: Optional[int] = None
    reputation: Optional[int] = None
    bio_text: Optional[str] = None
    visitor_messages: List[VisitorMessage] = field(default_factory=list)
    errors: List[FieldError] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        """True when at least one field failed to extract."""
        return bool(self.errors)

    def add_error(self, error: FieldError) -> None:
        self.errors.append(error)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'identity': self.identity,
            'url': self.url,
            'join_date': self.join_date,
            'total_posts': self.total_posts,
            'reputation': self.reputation,
            'bio_text': self.bio_text,
            'visitor_messages': [m.to_dict() for m in self.visitor_messages],
            'errors': [str(e) for e in self.errors],
        }


@dataclass(frozen=True)
class PostReference:
    """A link to a specific post: the page URL plus the post's anchor."""
    url: str
    fragment: str

    @classmethod
    def parse(cls, href: str, base_url: str) -> 'PostReference':
        """Split ``href`` into an absolute page URL and its fragment.

        Raises ValueError when the reference carries no fragment.
        """
        absolute, fragment = urldefrag(urljoin(base_url, href.strip()))
        if not fragment:
            raise ValueError(f"post reference has no fragment: {href!r}")
        return cls(url=absolute, fragment=fragment)

    @property
    def post_id(self) -> str:
        """Forum-wide post id, e.g. ``"123"`` for fragment ``"post123"``."""
        if not self.fragment.startswith(POST_FRAGMENT_PREFIX):
            raise ValueError(f"fragment is not a post anchor: {self.fragment!r}")
        post_id = self.fragment[len(POST_FRAGMENT_PREFIX):]
        if not post_id:
            raise ValueError(f"fragment has no post id: {self.fragment!r}")
        return post_id


@dataclass
class LatestPost:
    """Title and body of the most recent post found for a user."""
    title: str
    body: str
    url: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {'title': self.title, 'body': self.body, 'url': self.url}


class MonitorState(Enum):
    UNINITIALIZED = 'uninitialized'
    TRACKING = 'tracking'
    STOPPED = 'stopped'


@dataclass
class PollState:
    """Mutable state of one post count monitor."""
    UNINITIALIZED = -1

    target_identity: str
    poll_interval: float = 10.0
    last_known_post_count: int = UNINITIALIZED

    def __post_init__(self):
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {self.poll_interval}")

    @property
    def initialized(self) -> bool:
        return self.last_known_post_count != self.UNINITIALIZED
