"""Contract ABI resolution over an ordered list of contract source providers."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from ..core.fallback import run_provider_chain
from ..providers.base import ContractSourceProvider
from ..providers.contract_list import StaticContractListProvider
from ..providers.explorer import ExplorerSourceCodeProvider
from ..types import ContractRecord

logger = logging.getLogger(__name__)

READ_ONLY_MUTABILITY = frozenset({"pure", "view"})


def writable_fragments(abi: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Drop constructors and ``pure``/``view`` functions from an ABI."""
    return [
        fragment
        for fragment in abi
        if fragment.get("type") != "constructor"
        and fragment.get("stateMutability") not in READ_ONLY_MUTABILITY
    ]


class ContractMetadataResolver:
    """Resolve a contract's ABI and name, following proxies.

    ``filter_read_only`` keeps only state-changing fragments, for clients
    that build transactions. ``preserve_proxy_name`` reports the name the
    proxy was deployed under instead of the implementation's.
    """

    def __init__(
        self,
        providers: Sequence[ContractSourceProvider],
        *,
        filter_read_only: bool = False,
        preserve_proxy_name: bool = True,
    ):
        self.providers = list(providers)
        self.filter_read_only = filter_read_only
        self.preserve_proxy_name = preserve_proxy_name

    async def resolve(self, chain_id: int, address: str) -> Optional[ContractRecord]:
        """Return the contract record, or ``None`` if no verified contract exists.

        Raises:
            ProviderChainExhausted: every provider failed.
        """
        record: Optional[ContractRecord] = await run_provider_chain(
            "contract", self.providers, chain_id, address
        )
        if record is None:
            return None

        update: Dict[str, Any] = {"proxy_name": None}
        if self.preserve_proxy_name and record.proxy_name is not None:
            update["contract_name"] = record.proxy_name
        if self.filter_read_only:
            update["abi"] = writable_fragments(record.abi)

        if record.implementation:
            logger.debug("Contract %s on chain %s is a proxy for %s", address, chain_id, record.implementation)
        return record.model_copy(update=update)


def default_contract_providers() -> List[ContractSourceProvider]:
    return [StaticContractListProvider(), ExplorerSourceCodeProvider()]


__all__ = ["ContractMetadataResolver", "writable_fragments", "default_contract_providers"]
