"""
Named configuration values for providers.

Providers never read credentials from ``settings`` directly; they ask the
store by name at call time. When ``edge_config_url`` is set, a remote JSON
object is loaded once per process and takes precedence over local settings.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from ..config import Settings, settings as default_settings
from ..core.errors import MissingConfigError, ProviderUnavailableError

logger = logging.getLogger(__name__)


class ConfigStore:
    """Read-only key/value configuration with a lazily loaded remote layer."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings or default_settings
        self._transport = transport
        self._remote: Optional[Dict[str, Any]] = None
        self._lock = asyncio.Lock()

    async def _load_remote(self) -> Dict[str, Any]:
        if self._remote is not None:
            return self._remote

        async with self._lock:
            # Double-check after acquiring lock
            if self._remote is not None:
                return self._remote

            url = self._settings.edge_config_url
            try:
                async with httpx.AsyncClient(transport=self._transport, timeout=10) as client:
                    resp = await client.get(url)
                    resp.raise_for_status()
                    data = resp.json()
            except (httpx.HTTPError, ValueError) as exc:
                raise ProviderUnavailableError(f"Failed to load edge config: {exc!r}") from exc

            if not isinstance(data, dict):
                raise ProviderUnavailableError("Edge config document is not a JSON object")

            logger.info("Loaded edge config", extra={"keys": len(data)})
            self._remote = data
            return data

    async def get(self, name: str) -> Any:
        """Return the value for ``name`` or raise ``MissingConfigError``."""
        value: Any = None
        if self._settings.has_edge_config:
            remote = await self._load_remote()
            value = remote.get(name)

        if value in (None, "", {}):
            value = getattr(self._settings, name, None)

        if value in (None, "", {}):
            raise MissingConfigError(name)
        return value

    async def has(self, name: str) -> bool:
        try:
            await self.get(name)
        except MissingConfigError:
            return False
        return True


# Singleton instance
_config_store: Optional[ConfigStore] = None


def get_config_store() -> ConfigStore:
    """Get the singleton ConfigStore instance."""
    global _config_store
    if _config_store is None:
        _config_store = ConfigStore()
    return _config_store


def reset_config_store() -> None:
    global _config_store
    _config_store = None
