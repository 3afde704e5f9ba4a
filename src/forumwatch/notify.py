import logging
from typing import Awaitable, Callable, Optional

import aiohttp

from .errors import ForumWatchError
from .models import LatestPost

logger = logging.getLogger(__name__)

DISCORD_MESSAGE_LIMIT = 2000


def format_post_message(post: LatestPost, label: str) -> str:
    """Render a new-post announcement, trimmed to fit a Discord message."""
    message = f"**__NEW POST__ by {label} in topic: {post.title}**\nPost: {post.body}"
    if len(message) > DISCORD_MESSAGE_LIMIT:
        message = message[:DISCORD_MESSAGE_LIMIT - 3] + "..."
    return message


class LoggingNotifier:
    """Writes announcements to the log instead of a chat channel."""

    async def send(self, post: LatestPost, label: str) -> None:
        logger.info(format_post_message(post, label))


class DiscordWebhookNotifier:
    """Posts announcements to a Discord channel through a webhook URL."""

    def __init__(self, webhook_url: str, session: Optional[aiohttp.ClientSession] = None,
                 timeout: float = 10):
        self.webhook_url = webhook_url
        self.session = session
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def send(self, post: LatestPost, label: str) -> None:
        payload = {'content': format_post_message(post, label)}
        if self.session is None:
            async with aiohttp.ClientSession() as session:
                await self._post(session, payload)
        else:
            await self._post(self.session, payload)

    async def _post(self, session: aiohttp.ClientSession, payload: dict) -> None:
        async with session.post(self.webhook_url, json=payload, timeout=self.timeout) as response:
            if response.status >= 300:
                body = await response.text()
                logger.error(f"Discord webhook returned HTTP {response.status}: {body}")
            else:
                logger.debug(f"Sent announcement for {payload['content'][:60]!r}")


def new_post_announcer(fetch_latest_post: Callable[[str], Awaitable[LatestPost]], user_id: str,
                       notifier, label: Optional[str] = None) -> Callable[[], Awaitable[None]]:
    """Build the zero-argument callback a monitor fires on a new post.

    The callback looks up the user's latest post and hands it to ``notifier``.
    A failed lookup is logged and nothing is sent.
    """
    label = label or f"user {user_id}"

    async def announce() -> None:
        try:
            post = await fetch_latest_post(user_id)
        except ForumWatchError as e:
            logger.error(f"Failed to get latest post for {label}: {e}")
            return
        await notifier.send(post, label)

    return announce
