"""
Token metadata tiers: bundled lists, remote token lists and on-chain calls.

Lists use the Uniswap token list format (``{"tokens": [{address, name,
symbol, decimals, logoURI, extensions}]}``). Address matching is
case-insensitive.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..cache import InflightCache
from ..config import DATA_DIR, settings
from ..core.chain_keys import STATIC_TOKEN_LISTS, ChainKeyMap
from ..core.errors import (
    MalformedResponseError,
    ResolverError,
    TokenNotListedError,
    UnsupportedChainError,
)
from ..types import TokenMetadataRecord
from .base import TokenMetadataProvider
from .rpc import OnChainCallClient

logger = logging.getLogger(__name__)

TOKEN_LIST_DIR = DATA_DIR / "tokenlists"

# Remote token list documents, keyed by (chain_id, source_index)
remote_token_list_cache = InflightCache(ttl_seconds=settings.token_list_cache_ttl_seconds)


@lru_cache(maxsize=None)
def load_bundled_list(filename: str) -> Dict[str, Any]:
    with open(TOKEN_LIST_DIR / filename, encoding="utf-8") as f:
        return json.load(f)


def find_token(token_list: Dict[str, Any], address: str) -> Optional[Dict[str, Any]]:
    target = address.lower()
    for entry in token_list.get("tokens") or []:
        if str(entry.get("address", "")).lower() == target:
            return entry
    return None


def _to_record(entry: Dict[str, Any], provider: str) -> TokenMetadataRecord:
    try:
        return TokenMetadataRecord.from_token_list(entry)
    except (KeyError, ValidationError) as exc:
        raise MalformedResponseError(
            f"Invalid token list entry for {entry.get('address')}", provider=provider
        ) from exc


class StaticTokenListProvider(TokenMetadataProvider):
    """Token lists bundled with the service; authoritative for known tokens"""

    name = "static-list"

    def __init__(self, lists: ChainKeyMap[str] = STATIC_TOKEN_LISTS, **kwargs: Any):
        super().__init__(**kwargs)
        self.lists = lists

    async def fetch(self, chain_id: int, address: str) -> TokenMetadataRecord:
        token_list = load_bundled_list(self.lists.resolve(chain_id))
        entry = find_token(token_list, address)
        if entry is None:
            raise TokenNotListedError(self.name, address)
        return _to_record(entry, self.name)


class RemoteTokenListProvider(TokenMetadataProvider):
    """Third-party token list documents, scanned in configured order.

    Documents are downloaded once per ``(chain_id, source_index)`` and shared
    between concurrent lookups through ``remote_token_list_cache``.
    """

    name = "remote-list"

    def __init__(
        self,
        sources: Optional[Dict[int, List[str]]] = None,
        cache: Optional[InflightCache] = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.sources = sources if sources is not None else settings.remote_token_lists
        self.cache = cache if cache is not None else remote_token_list_cache

    async def _download(self, url: str) -> Dict[str, Any]:
        document = await self._request_json("GET", url)
        if not isinstance(document, dict) or not isinstance(document.get("tokens"), list):
            raise MalformedResponseError(f"{url} is not a token list", provider=self.name)
        return document

    async def fetch(self, chain_id: int, address: str) -> TokenMetadataRecord:
        sources = self.sources.get(chain_id)
        if not sources:
            raise UnsupportedChainError(self.name, chain_id)

        source_error: Optional[ResolverError] = None
        for index, url in enumerate(sources):
            try:
                document = await self.cache.get_or_fetch(
                    (chain_id, index), lambda url=url: self._download(url)
                )
            except ResolverError as exc:
                logger.warning("Token list %s for chain %s unavailable: %s", url, chain_id, exc)
                source_error = exc
                continue

            entry = find_token(document, address)
            if entry is not None:
                return _to_record(entry, self.name)

        if source_error is not None:
            raise source_error
        raise TokenNotListedError(self.name, address)


class OnChainTokenMetadataProvider(TokenMetadataProvider):
    """``name()``/``symbol()``/``decimals()`` read directly from the token contract"""

    name = "rpc"

    def __init__(self, client: Optional[OnChainCallClient] = None, **kwargs: Any):
        super().__init__(**kwargs)
        self.client = client or OnChainCallClient(config=self._config, transport=self._transport)

    async def ready(self) -> bool:
        return await self.config.has("rpc_map")

    async def fetch(self, chain_id: int, address: str) -> TokenMetadataRecord:
        return await self.client.erc20_metadata(chain_id, address)


__all__ = [
    "StaticTokenListProvider",
    "RemoteTokenListProvider",
    "OnChainTokenMetadataProvider",
    "remote_token_list_cache",
    "load_bundled_list",
    "find_token",
]
