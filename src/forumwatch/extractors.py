"""Field extractors for vBulletin profile pages.

Each extractor takes a document root and a compiled query and returns the
field's value, raising :class:`FieldError` when the field is missing or
malformed. The identity extractor raises :class:`IdentityNotFoundError`
instead, since a page without a user name is not a profile at all.
"""

import re
from typing import List

from bs4 import Tag

from .errors import FieldError, IdentityNotFoundError
from .models import VisitorMessage
from .query import Query

JOIN_DATE_PREFIX = "Join Date: "
TOTAL_POSTS_PREFIX = "Total Posts: "
REPUTATION_PREFIX = "Reputation: "

COUNT_PATTERN = re.compile(r"[+-]?[0-9]+", re.ASCII)

IDENTITY_QUERY = Query.compile('#username_box > h1')
JOIN_DATE_QUERY = Query.compile(
    f'#collapseobj_stats > div > * > ul > :-soup-contains("{JOIN_DATE_PREFIX}")'
)
TOTAL_POSTS_QUERY = Query.compile(
    '#collapseobj_stats > div > fieldset:nth-of-type(1) > ul > li:nth-of-type(1)'
)
BIO_QUERY = Query.compile(
    '#collapseobj_aboutme > div > ul > li:nth-of-type(1) > dl > dd:nth-of-type(1)'
)
VISITOR_CONTAINER_QUERY = Query.compile('#message_list')
VISITOR_BLOCK_QUERY = Query.compile('#message_list > *')
VISITOR_AUTHOR_QUERY = Query.compile('div:nth-of-type(2) > div:nth-of-type(1) > div > a')
VISITOR_BODY_QUERY = Query.compile('div:nth-of-type(2) > div:nth-of-type(2)')


def parse_count(text: str, prefix: str = "") -> int:
    """Parse a forum counter such as ``"Total Posts: 12,345"``.

    Raises ValueError if what remains is not an ASCII decimal integer.
    """
    text = text.strip()
    if prefix and text.startswith(prefix.strip()):
        text = text[len(prefix.strip()):]
    text = text.replace(",", "").strip()
    if not COUNT_PATTERN.fullmatch(text):
        raise ValueError(f"not a count: {text!r}")
    return int(text)


def extract_identity(root: Tag, query: Query = IDENTITY_QUERY) -> str:
    value, found = query.string_value(root)
    value = value.strip()
    if not found or not value:
        raise IdentityNotFoundError("identity not found", {'query': query.expression})
    return value


def extract_join_date(root: Tag, query: Query = JOIN_DATE_QUERY) -> str:
    value, found = query.string_value(root)
    if not found:
        raise FieldError("join_date", "join date query did not return a result")
    value = value.strip()
    if value.startswith(JOIN_DATE_PREFIX.strip()):
        value = value[len(JOIN_DATE_PREFIX.strip()):]
    return value.strip()


def extract_total_posts(root: Tag, query: Query = TOTAL_POSTS_QUERY) -> int:
    value, found = query.string_value(root)
    if not found:
        raise FieldError("total_posts", "total posts query did not return a result")
    try:
        total = parse_count(value, TOTAL_POSTS_PREFIX)
    except ValueError as e:
        raise FieldError("total_posts", f"cannot convert posts to integer: {value.strip()!r}") from e
    if total < 0:
        raise FieldError("total_posts", f"negative post count: {total}")
    return total


def extract_bio(root: Tag, query: Query = BIO_QUERY) -> str:
    # Returned verbatim, bios are often multi-line
    value, found = query.string_value(root)
    if not found:
        raise FieldError("bio_text", "user bio query did not return a result")
    return value


def extract_visitor_messages(
    root: Tag,
    container_query: Query = VISITOR_CONTAINER_QUERY,
    block_query: Query = VISITOR_BLOCK_QUERY,
    author_query: Query = VISITOR_AUTHOR_QUERY,
    body_query: Query = VISITOR_BODY_QUERY,
) -> List[VisitorMessage]:
    """Collect visitor messages in page order.

    A missing message list is an error; an empty one is not. Blocks lacking
    an author or a body are skipped.
    """
    if not container_query.exists(root):
        raise FieldError("visitor_messages", "visitor messages query did not return a result")

    messages = []
    for block in block_query.iterate(root):
        author, ok = author_query.string_value(block)
        if not ok:
            continue
        body, ok = body_query.string_value(block)
        if not ok:
            continue
        messages.append(VisitorMessage(author=author.strip(), body=body.strip()))
    return messages
