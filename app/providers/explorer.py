"""Etherscan-family block explorer provider (``getsourcecode``)."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..core.chain_keys import EXPLORER_CHAINS, ChainKeyMap
from ..core.errors import MalformedResponseError, ProviderUnavailableError
from ..types import ContractRecord
from .base import ContractSourceProvider

logger = logging.getLogger(__name__)

UNVERIFIED_ABI = "Contract source code not verified"


class ExplorerSourceCodeProvider(ContractSourceProvider):
    """Verified ABI and contract name from an Etherscan-compatible explorer"""

    name = "polygonscan"

    def __init__(self, chains: ChainKeyMap = EXPLORER_CHAINS, **kwargs: Any):
        super().__init__(**kwargs)
        self.chains = chains

    async def ready(self) -> bool:
        return await self.config.has("polygonscan_api_key")

    async def fetch_source(self, chain_id: int, address: str) -> Optional[ContractRecord]:
        base_url, key_name = self.chains.resolve(chain_id)
        api_key = await self.config.get(key_name)

        data = await self._request_json(
            "GET",
            base_url,
            params={
                "module": "contract",
                "action": "getsourcecode",
                "address": address,
                "apikey": api_key,
            },
        )
        if not isinstance(data, dict):
            raise MalformedResponseError(f"{self.name} returned {type(data).__name__}", provider=self.name)

        if str(data.get("status")) == "0":
            raise ProviderUnavailableError(
                f"Failed to get contract source code, chainId: {chain_id}, "
                f"contractAddress: {address}, message: {data.get('message')}, "
                f"result: {data.get('result')}",
                provider=self.name,
            )

        rows = data.get("result")
        if not isinstance(rows, list):
            raise MalformedResponseError(f"{self.name} result is not a list", provider=self.name)
        if not rows:
            return None
        return self._parse_row(rows[0], address)

    def _parse_row(self, row: Dict[str, Any], address: str) -> Optional[ContractRecord]:
        abi_text = row.get("ABI") or ""
        implementation = (row.get("Implementation") or "").strip()

        if abi_text == UNVERIFIED_ABI:
            # An unverified proxy can still point at a verified implementation
            if implementation and implementation.lower() != address.lower():
                return ContractRecord(
                    contract_name=row.get("ContractName") or "",
                    abi=[],
                    implementation=implementation,
                )
            logger.debug("Contract %s is not verified on %s", address, self.name)
            return None

        try:
            abi = json.loads(abi_text)
        except ValueError as exc:
            raise MalformedResponseError(
                f"ABI for {address} is not valid JSON", provider=self.name
            ) from exc
        if not isinstance(abi, list):
            raise MalformedResponseError(f"ABI for {address} is not a list", provider=self.name)

        try:
            return ContractRecord(
                contract_name=row.get("ContractName") or "",
                abi=abi,
                implementation=implementation,
            )
        except ValidationError as exc:
            raise MalformedResponseError(
                f"ABI for {address} has invalid fragments", provider=self.name
            ) from exc


__all__ = ["ExplorerSourceCodeProvider", "UNVERIFIED_ABI"]
