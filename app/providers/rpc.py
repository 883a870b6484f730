"""
Raw ``eth_call`` client for read-only ERC-20 accessors.

Only zero-argument accessors (``name``, ``symbol``, ``decimals``) and
``balanceOf(address)`` are supported. Return data is ABI-decoded with
``eth_abi``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import decode_hex

from ..core.errors import MalformedResponseError, UnsupportedChainError
from ..types import TokenMetadataRecord
from .base import HttpClient

logger = logging.getLogger(__name__)

NAME_SELECTOR = "0x06fdde03"
SYMBOL_SELECTOR = "0x95d89b41"
DECIMALS_SELECTOR = "0x313ce567"
BALANCE_OF_SELECTOR = "0x70a08231"

# Tokens whose decimals() is missing or undecodable are treated as 18-decimal
DEFAULT_DECIMALS = 18


def decode_string(data: str) -> str:
    """Decode an ABI-encoded ``string`` return value.

    Some early tokens (MKR, SAI) return ``bytes32`` instead; a bare 32-byte
    payload is read as a NUL-padded UTF-8 string.
    """
    try:
        raw = decode_hex(data)
    except (TypeError, ValueError) as exc:
        raise MalformedResponseError(f"Return data is not hex: {data!r}") from exc

    if len(raw) == 32:
        try:
            return raw.rstrip(b"\x00").decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedResponseError("bytes32 return value is not UTF-8") from exc

    try:
        (value,) = decode(["string"], raw)
    except (DecodingError, UnicodeDecodeError, ValueError) as exc:
        raise MalformedResponseError(f"Cannot decode string return value: {exc}") from exc
    return value


def decode_uint(data: Optional[str]) -> Optional[int]:
    """Parse a big-endian hex integer; ``None`` when there is nothing to parse."""
    if not data or data in ("0x", "0X"):
        return None
    try:
        return int(data, 16)
    except (TypeError, ValueError):
        return None


class OnChainCallClient(HttpClient):
    """JSON-RPC ``eth_call`` against the endpoint configured for each chain."""

    name = "rpc"

    async def rpc_url(self, chain_id: int) -> str:
        rpc_map: Mapping[Any, str] = await self.config.get("rpc_map")
        # Remote config documents key chains by string, local settings by int
        url = rpc_map.get(chain_id) or rpc_map.get(str(chain_id))
        if not url:
            raise UnsupportedChainError(self.name, chain_id)
        return url

    async def eth_call(self, chain_id: int, to: str, data: str) -> str:
        """Execute a read-only call and return the raw hex return value."""
        url = await self.rpc_url(chain_id)
        result = await self._json_rpc(url, "eth_call", [{"to": to, "data": data}, "latest"])
        if not isinstance(result, str):
            raise MalformedResponseError(
                f"eth_call returned {type(result).__name__}, expected hex string",
                provider=self.name,
            )
        return result

    async def call_string(self, chain_id: int, to: str, selector: str) -> str:
        return decode_string(await self.eth_call(chain_id, to, selector))

    async def call_decimals(self, chain_id: int, to: str) -> int:
        decimals = decode_uint(await self.eth_call(chain_id, to, DECIMALS_SELECTOR))
        if decimals is None:
            logger.debug("decimals() of %s on chain %s undecodable, using %s", to, chain_id, DEFAULT_DECIMALS)
            return DEFAULT_DECIMALS
        if decimals > 255:
            raise MalformedResponseError(f"decimals() of {to} returned {decimals}", provider=self.name)
        return decimals

    async def erc20_metadata(self, chain_id: int, token_address: str) -> TokenMetadataRecord:
        """Fetch name, symbol and decimals concurrently.

        Any failing accessor fails the whole lookup; no partial record is built.
        """
        name, symbol, decimals = await asyncio.gather(
            self.call_string(chain_id, token_address, NAME_SELECTOR),
            self.call_string(chain_id, token_address, SYMBOL_SELECTOR),
            self.call_decimals(chain_id, token_address),
        )
        return TokenMetadataRecord(
            name=name,
            symbol=symbol,
            address=token_address,
            decimals=decimals,
        )

    async def balance_of(self, chain_id: int, token_address: str, holder: str) -> int:
        data = BALANCE_OF_SELECTOR + encode(["address"], [holder.lower()]).hex()
        balance = decode_uint(await self.eth_call(chain_id, token_address, data))
        if balance is None:
            raise MalformedResponseError(
                f"balanceOf on {token_address} returned no value", provider=self.name
            )
        return balance


__all__ = [
    "OnChainCallClient",
    "decode_string",
    "decode_uint",
    "DEFAULT_DECIMALS",
    "NAME_SELECTOR",
    "SYMBOL_SELECTOR",
    "DECIMALS_SELECTOR",
    "BALANCE_OF_SELECTOR",
]
