import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

import orjson

from .client import ForumClient
from .config import Config
from .errors import ForumWatchError
from .notify import DiscordWebhookNotifier, LoggingNotifier, new_post_announcer

logger = logging.getLogger(__name__)


def setup_logging(debug: bool, level: str = "INFO"):
    """Configure logging for the application."""
    logging.basicConfig(
        level=logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )


def positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Extract forum profiles and watch for new posts")
    parser.add_argument('--config', type=Path, help="Path to config JSON file")
    parser.add_argument('--debug', action='store_true', help="Enable debug logging")
    subparsers = parser.add_subparsers(dest='command', required=True)

    profile = subparsers.add_parser('profile', help="Print a user's profile as JSON")
    profile.add_argument('user', help="Numeric user id or full profile URL")
    profile.add_argument('--no-reputation', action='store_true',
                         help="Skip the reputation lookup (saves two requests)")

    latest = subparsers.add_parser('latest-post', help="Print a user's most recent post")
    latest.add_argument('user_id', help="Numeric user id")

    watch = subparsers.add_parser('watch', help="Announce new posts by the given users")
    watch.add_argument('user_ids', nargs='+', help="Numeric user ids to watch")
    watch.add_argument('--interval', type=positive_float, help="Seconds between profile checks")
    watch.add_argument('--webhook', help="Discord webhook URL for announcements")

    return parser


async def show_profile(client: ForumClient, user: str) -> int:
    url = user if not user.isdigit() else client.config.profile_url(user)
    try:
        snapshot = await client.fetch_user_profile(url)
    except ForumWatchError as e:
        logger.error(f"Failed to fetch profile: {e}")
        return 1
    sys.stdout.write(orjson.dumps(snapshot.to_dict(), option=orjson.OPT_INDENT_2).decode('utf-8'))
    sys.stdout.write("\n")
    return 0


async def show_latest_post(client: ForumClient, user_id: str) -> int:
    try:
        post = await client.fetch_latest_post(user_id)
    except ForumWatchError as e:
        logger.error(f"Failed to get latest post: {e}")
        return 1
    print(post.title)
    print(post.url or "")
    print()
    print(post.body)
    return 0


async def watch_users(client: ForumClient, user_ids: List[str],
                      interval: Optional[float], webhook: Optional[str]) -> int:
    webhook = webhook or client.config.discord_webhook_url
    notifier = DiscordWebhookNotifier(webhook) if webhook else LoggingNotifier()
    if not webhook:
        logger.info("No Discord webhook configured, announcements go to the log")

    handles = []
    for user_id in user_ids:
        announce = new_post_announcer(client.fetch_latest_post, user_id, notifier)
        handles.append(client.start_polling(user_id, announce, poll_interval=interval))

    await asyncio.gather(*(handle.task for handle in handles))
    return 0


async def run(args: argparse.Namespace, config: Config) -> int:
    async with ForumClient(config) as client:
        if args.command == 'profile':
            return await show_profile(client, args.user)
        if args.command == 'latest-post':
            return await show_latest_post(client, args.user_id)
        return await watch_users(client, args.user_ids, args.interval, args.webhook)


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line interface for forumwatch."""
    args = build_parser().parse_args(argv)

    config = Config.from_file(args.config)
    if getattr(args, 'no_reputation', False):
        config.fetch_reputation = False
    setup_logging(args.debug, config.log_level)

    try:
        return asyncio.run(run(args, config))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        return 130


if __name__ == '__main__':
    sys.exit(main())
