"""Resolver configuration and API key management."""

from __future__ import annotations

import json
import logging
import secrets
from dataclasses import dataclass, field, fields
from pathlib import Path


logger = logging.getLogger("simtarget.config")

CONFIG_DIR = Path.home() / ".simtarget"
API_KEY_FILE = CONFIG_DIR / "api-key"
USER_CONFIG_FILE = CONFIG_DIR / "config.json"

DEFAULT_SERVER_PORT = 9200


@dataclass
class ResolverConfig:
    """Configuration for target resolution and the optional HTTP surface."""

    host: str = "127.0.0.1"
    port: int = DEFAULT_SERVER_PORT
    udid_probe_timeout: float = 3.0
    poll_interval: float = 0.5
    simulator_service: str = "com.apple.iphonesimulator"
    udidetect_path: str | None = None
    api_key: str = field(default="", repr=False)

    def ensure_api_key(self) -> str:
        """Load or create the HTTP API key. Only the HTTP surface needs one."""
        if not self.api_key:
            self.api_key = self._load_or_create_api_key()
        return self.api_key

    @classmethod
    def from_user_config(cls, **overrides) -> ResolverConfig:
        """Build a config from ~/.simtarget/config.json, then apply overrides.

        Unknown keys in the file are ignored.
        """
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in read_user_config().items() if k in known}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @staticmethod
    def _load_or_create_api_key() -> str:
        """Load existing API key or generate a new one."""
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)

        if API_KEY_FILE.exists():
            key = API_KEY_FILE.read_text().strip()
            if key:
                return key

        key = secrets.token_urlsafe(32)
        API_KEY_FILE.write_text(key)
        API_KEY_FILE.chmod(0o600)
        return key

    @staticmethod
    def regenerate_api_key() -> str:
        """Generate a new API key, replacing the existing one."""
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        key = secrets.token_urlsafe(32)
        API_KEY_FILE.write_text(key)
        API_KEY_FILE.chmod(0o600)
        return key


def read_user_config() -> dict:
    """Read user config from ~/.simtarget/config.json. Returns {} if missing or invalid."""
    if not USER_CONFIG_FILE.exists():
        return {}
    try:
        data = json.loads(USER_CONFIG_FILE.read_text())
    except Exception as e:
        logger.warning("Failed to read config file %s: %s", USER_CONFIG_FILE, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: expected a JSON object", USER_CONFIG_FILE)
        return {}
    return data
