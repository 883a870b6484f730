"""ERC-20 metadata: bundled list, then remote token lists, then the token contract."""

from __future__ import annotations

from typing import List, Sequence

from ..core.errors import MalformedResponseError, ProviderChainExhausted
from ..core.fallback import run_provider_chain
from ..providers.base import TokenMetadataProvider
from ..providers.token_list import (
    OnChainTokenMetadataProvider,
    RemoteTokenListProvider,
    StaticTokenListProvider,
)
from ..types import TokenMetadataRecord


class TokenMetadataResolver:
    """Resolve name, symbol and decimals through ordered tiers.

    A tier that does not know the token raises ``TokenNotListedError`` and the
    next tier is tried.
    """

    def __init__(self, tiers: Sequence[TokenMetadataProvider]):
        self.tiers = list(tiers)

    async def resolve(self, chain_id: int, token_address: str) -> TokenMetadataRecord:
        """
        Raises:
            ProviderChainExhausted: no tier could resolve the token.
        """
        record = await run_provider_chain("tokenmeta", self.tiers, chain_id, token_address)
        if record is None:
            # Tiers never report "not found" as None; treat it as a failed chain
            raise ProviderChainExhausted(
                "tokenmeta", MalformedResponseError(f"No metadata for {token_address}")
            )
        return record


def default_token_metadata_tiers() -> List[TokenMetadataProvider]:
    return [
        StaticTokenListProvider(),
        RemoteTokenListProvider(),
        OnChainTokenMetadataProvider(),
    ]


__all__ = ["TokenMetadataResolver", "default_token_metadata_tiers"]
