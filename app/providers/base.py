from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, Sequence, TypeVar

import httpx

from ..config import settings
from ..core.errors import CyclicProxyError, MalformedResponseError, ProviderUnavailableError
from ..services.config_store import ConfigStore, get_config_store
from ..types import ContractRecord, TokenBalanceEntry, TokenMetadataRecord

R = TypeVar("R")


class HttpClient:
    """JSON over HTTP with provider-level error mapping.

    Transport failures and non-2xx responses become
    ``ProviderUnavailableError``; bodies that are not the expected JSON become
    ``MalformedResponseError``.
    """

    name: str
    timeout_s: Optional[float] = None

    def __init__(
        self,
        *,
        config: Optional[ConfigStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._config = config
        self._transport = transport

    @property
    def config(self) -> ConfigStore:
        return self._config or get_config_store()

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self.timeout_s)

    async def _request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            async with self._client() as client:
                response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise ProviderUnavailableError(
                f"{self.name} request failed: {exc!r}", provider=self.name
            ) from exc

        if response.is_error:
            raise ProviderUnavailableError(
                f"Unexpected response: {response.status_code} {response.reason_phrase}",
                provider=self.name,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(
                f"{self.name} returned a non-JSON body", provider=self.name
            ) from exc

    async def _json_rpc(self, url: str, method: str, params: Any) -> Any:
        """POST a JSON-RPC 2.0 request and return its ``result`` member."""
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}
        data = await self._request_json(
            "POST",
            url,
            json=payload,
            headers={"accept": "application/json", "content-type": "application/json"},
        )
        if not isinstance(data, dict):
            raise MalformedResponseError(f"{self.name} returned {type(data).__name__}", provider=self.name)
        if data.get("error"):
            raise ProviderUnavailableError(f"{self.name} error: {data['error']}", provider=self.name)
        if "result" not in data:
            raise MalformedResponseError(f"{self.name} response has no result", provider=self.name)
        return data["result"]


class Provider(HttpClient, ABC, Generic[R]):
    """Base provider interface.

    A provider answers one query for one chain id and normalizes the native
    response into the resolver's record type. Returning ``None`` means the
    provider authoritatively found nothing.
    """

    @abstractmethod
    async def fetch(self, chain_id: int, address: str) -> Optional[R]:
        """Resolve ``address`` on ``chain_id``."""

    async def ready(self) -> bool:
        """Check if provider has the configuration it needs"""
        return True


class ContractSourceProvider(Provider[ContractRecord]):
    """Provider for verified contract source metadata.

    Subclasses implement ``fetch_source`` for a single address. ``fetch``
    follows proxy indirection: whenever a record names an implementation
    address different from the queried one, that address is fetched next.
    The returned record carries the implementation that was followed and the
    name declared by the outermost proxy.
    """

    max_proxy_depth: Optional[int] = None

    @abstractmethod
    async def fetch_source(self, chain_id: int, address: str) -> Optional[ContractRecord]:
        """Fetch one contract without following proxies."""

    async def fetch(self, chain_id: int, address: str) -> Optional[ContractRecord]:
        max_depth = self.max_proxy_depth or settings.max_proxy_depth
        proxy_name: Optional[str] = None
        followed = ""
        target = address

        for _ in range(max_depth + 1):
            record = await self.fetch_source(chain_id, target)
            if record is None:
                return None

            implementation = record.implementation
            if not implementation or implementation.lower() == target.lower():
                return record.model_copy(
                    update={"implementation": followed, "proxy_name": proxy_name}
                )

            if proxy_name is None:
                proxy_name = record.contract_name
            followed = implementation
            target = implementation

        raise CyclicProxyError(address, max_depth, provider=self.name)


class BalanceProvider(Provider[List[TokenBalanceEntry]]):
    """Provider for ERC-20 balances held by a wallet"""


class TokenMetadataProvider(Provider[TokenMetadataRecord]):
    """Provider for ERC-20 name, symbol and decimals"""


async def describe(providers: Sequence[Provider]) -> List[Dict[str, Any]]:
    """Provider names and readiness, in chain order."""
    status = []
    for provider in providers:
        try:
            ready = await provider.ready()
        except ProviderUnavailableError as exc:
            status.append({"name": provider.name, "ready": False, "reason": exc.message})
            continue
        status.append({"name": provider.name, "ready": ready})
    return status


def is_zero_balance(raw: Optional[str]) -> bool:
    """True for ``"0"``, ``"0x"`` and any all-zero decimal or hex string."""
    if raw is None:
        return True
    value = raw.strip().lower()
    if value.startswith("0x"):
        value = value[2:]
    return not value.strip("0")
