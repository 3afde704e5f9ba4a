import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union
from urllib.parse import urljoin

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "FORUMWATCH_CONFIG"


class Config:
    """Settings for fetching forum pages and polling profiles."""

    DEFAULT_CONFIG_PATH = Path.home() / ".config" / "forumwatch" / "config.json"

    def __init__(
        self,
        base_url: str = "http://forum.sa-mp.com/",
        poll_interval: float = 10,
        request_timeout: float = 30,
        connect_timeout: float = 10,
        request_delay: float = 0.0,
        user_agent: str = (
            'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
            '(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36'
        ),
        fetch_reputation: bool = True,
        discord_webhook_url: Optional[str] = None,
        log_level: str = "INFO",
    ):
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval}")

        # Always ends with '/' for urljoin
        self.base_url = base_url if base_url.endswith('/') else base_url + '/'
        self.poll_interval = poll_interval
        self.request_timeout = request_timeout
        self.connect_timeout = connect_timeout
        self.request_delay = request_delay
        self.user_agent = user_agent
        self.fetch_reputation = fetch_reputation
        self.discord_webhook_url = discord_webhook_url
        self.log_level = log_level

    @classmethod
    def resolve_path(cls, config_path: Optional[Union[str, Path]] = None) -> Path:
        """Explicit path, then $FORUMWATCH_CONFIG, then the default location."""
        if config_path:
            return Path(config_path)
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path)
        return cls.DEFAULT_CONFIG_PATH

    @classmethod
    def from_file(cls, config_path: Optional[Union[str, Path]] = None) -> 'Config':
        """Load configuration from file, falling back to defaults."""
        config_path = cls.resolve_path(config_path)
        if not config_path.exists():
            logger.debug(f"No config file at {config_path}, using defaults")
            return cls()

        try:
            with open(config_path) as f:
                config_data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load config from {config_path}: {e}")
            return cls()

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'Config':
        """Create Config instance from dictionary."""
        known = {}
        for key, value in config_dict.items():
            if key in cls._fields():
                known[key] = value
            else:
                logger.warning(f"Ignoring unknown config key: {key}")
        return cls(**known)

    @staticmethod
    def _fields():
        return (
            'base_url', 'poll_interval', 'request_timeout', 'connect_timeout',
            'request_delay', 'user_agent', 'fetch_reputation',
            'discord_webhook_url', 'log_level',
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for serialization."""
        return {key: getattr(self, key) for key in self._fields()}

    def save(self, config_path: Optional[Union[str, Path]] = None) -> None:
        """Save configuration to file."""
        config_path = self.resolve_path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    def profile_url(self, user_id: str) -> str:
        return urljoin(self.base_url, f"member.php?u={user_id}")

    def post_search_url(self, user_id: str) -> str:
        return urljoin(self.base_url, f"search.php?do=finduser&u={user_id}")
