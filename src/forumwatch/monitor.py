"""Polling a user's profile and reacting when their post count grows.

A monitor starts UNINITIALIZED. Its first successful observation only records
the baseline, so posts that existed before the monitor started never trigger
the callback. From then on it is TRACKING and fires the callback once for each
tick that sees a strictly larger count. ``stop()`` moves it to STOPPED.
"""

import asyncio
import inspect
import logging
import time
from contextlib import suppress
from typing import Any, Awaitable, Callable, Optional

from .errors import ForumWatchError
from .models import MonitorState, PollState, ProfileSnapshot

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 10.0

FetchProfile = Callable[[str], Awaitable[ProfileSnapshot]]
Callback = Callable[[], Any]


class PostCountMonitor:
    """Tracks the post count of one user and calls back on new posts.

    Ticks never overlap: each one, callback included, finishes before the
    next is scheduled. A tick that overruns the interval is followed
    immediately by the next one.
    """

    def __init__(self, fetch_profile: FetchProfile, profile_url: str, on_new_post: Callback,
                 identity: Optional[str] = None, poll_interval: float = DEFAULT_POLL_INTERVAL):
        self.fetch_profile = fetch_profile
        self.profile_url = profile_url
        self.on_new_post = on_new_post
        self.poll_state = PollState(target_identity=identity or profile_url, poll_interval=poll_interval)
        self._stopped = False
        self._wakeup: Optional[asyncio.Event] = None

    @property
    def state(self) -> MonitorState:
        if self._stopped:
            return MonitorState.STOPPED
        if self.poll_state.initialized:
            return MonitorState.TRACKING
        return MonitorState.UNINITIALIZED

    @property
    def last_known_post_count(self) -> Optional[int]:
        if not self.poll_state.initialized:
            return None
        return self.poll_state.last_known_post_count

    async def tick(self) -> bool:
        """Run one polling cycle. Returns True if the callback was invoked."""
        if self._stopped:
            return False

        identity = self.poll_state.target_identity
        logger.debug(f"Checking profile page for {identity}")
        try:
            snapshot = await self.fetch_profile(self.profile_url)
        except ForumWatchError as e:
            logger.warning(f"Failed to poll profile for {identity}: {e}")
            return False
        except Exception as e:
            logger.error(f"Unexpected error polling profile for {identity}: {e}", exc_info=True)
            return False

        observed = snapshot.total_posts
        if observed is None:
            logger.warning(f"Profile for {identity} has no post count, skipping tick")
            return False

        if not self.poll_state.initialized:
            self.poll_state.last_known_post_count = observed
            logger.info(f"Baseline post count for {identity}: {observed}")
            return False

        last = self.poll_state.last_known_post_count
        if observed > last:
            logger.info(f"New post by {identity}: post count {last} -> {observed}")
            await self._notify()
            self.poll_state.last_known_post_count = observed
            return True

        if observed < last:
            logger.info(f"Post count for {identity} dropped {last} -> {observed}, keeping baseline")
        return False

    async def _notify(self) -> None:
        try:
            result = self.on_new_post()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"New post callback for {self.poll_state.target_identity} failed: {e}",
                         exc_info=True)

    async def run(self) -> None:
        """Poll until :meth:`stop` is called."""
        self._wakeup = asyncio.Event()
        if self._stopped:
            return
        interval = self.poll_state.poll_interval
        logger.info(f"Polling {self.profile_url} every {interval}s")

        while not self._stopped:
            started = time.monotonic()
            await self.tick()
            remaining = interval - (time.monotonic() - started)
            if remaining > 0 and not self._stopped:
                with suppress(asyncio.TimeoutError):
                    await asyncio.wait_for(self._wakeup.wait(), timeout=remaining)

        logger.info(f"Stopped polling {self.profile_url}")

    def stop(self) -> None:
        self._stopped = True
        if self._wakeup is not None:
            self._wakeup.set()


class PollingHandle:
    """Returned by :func:`start_polling`; stops the background task."""

    def __init__(self, monitor: PostCountMonitor, task: 'asyncio.Task'):
        self.monitor = monitor
        self.task = task

    @property
    def state(self) -> MonitorState:
        return self.monitor.state

    @property
    def done(self) -> bool:
        return self.task.done()

    async def stop(self, timeout: Optional[float] = None) -> None:
        """Stop polling, letting an in-flight tick finish within ``timeout``."""
        self.monitor.stop()
        done, _ = await asyncio.wait({self.task}, timeout=timeout)
        if not done:
            self.task.cancel()
            with suppress(asyncio.CancelledError):
                await self.task


def start_polling(fetch_profile: FetchProfile, profile_url: str, on_new_post: Callback,
                  identity: Optional[str] = None,
                  poll_interval: float = DEFAULT_POLL_INTERVAL) -> PollingHandle:
    """Start a monitor as a background task on the running event loop."""
    monitor = PostCountMonitor(fetch_profile, profile_url, on_new_post,
                               identity=identity, poll_interval=poll_interval)
    task = asyncio.ensure_future(monitor.run())
    return PollingHandle(monitor, task)
