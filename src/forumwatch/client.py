from typing import Optional

from .config import Config
from .fetcher import DocumentFetcher
from .models import LatestPost, ProfileSnapshot
from .monitor import Callback, PollingHandle, start_polling
from .posts import PostLocator
from .profile import ProfileAssembler


class ForumClient:
    """Entry point for profile lookups, post lookups and post count polling.

    All components share one DocumentFetcher, created from ``config`` unless
    one is passed in.
    """

    def __init__(self, config: Optional[Config] = None, fetcher: Optional[DocumentFetcher] = None):
        self.config = config or Config()
        self.fetcher = fetcher or DocumentFetcher(self.config)
        self.locator = PostLocator(self.fetcher, self.config)
        self.assembler = ProfileAssembler(self.fetcher, self.locator, self.config)
        self._handles = []

    async def __aenter__(self) -> 'ForumClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def fetch_user_profile(self, url: str) -> ProfileSnapshot:
        return await self.assembler.fetch_user_profile(url)

    async def fetch_latest_post(self, user_id: str) -> LatestPost:
        return await self.locator.fetch_latest_post(user_id)

    def start_polling(self, user_id: str, on_new_post: Callback,
                      poll_interval: Optional[float] = None) -> PollingHandle:
        """Poll ``user_id``'s profile in the background; see PostCountMonitor."""
        handle = start_polling(
            self.fetch_user_profile,
            self.config.profile_url(user_id),
            on_new_post,
            identity=user_id,
            poll_interval=self.config.poll_interval if poll_interval is None else poll_interval,
        )
        self._handles.append(handle)
        handle.task.add_done_callback(lambda _: self._forget(handle))
        return handle

    def _forget(self, handle: PollingHandle) -> None:
        if handle in self._handles:
            self._handles.remove(handle)

    async def close(self) -> None:
        """Stop every monitor started by this client and close the fetcher."""
        for handle in list(self._handles):
            if not handle.done:
                await handle.stop()
        self._handles.clear()
        await self.fetcher.close()
