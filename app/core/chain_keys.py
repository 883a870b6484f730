"""Per-provider chain vocabularies.

Every provider names networks its own way. Resolvers work with integer chain
ids and translate at the provider boundary through a ``ChainKeyMap``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Mapping, TypeVar

from .errors import UnsupportedChainError

K = TypeVar("K")

ETHEREUM = 1
POLYGON = 137
POLYGON_MUMBAI = 80001
ARBITRUM_ONE = 42161
BSC = 56
BSC_TESTNET = 97
LUMI_ROLLUP = 94168

SUPPORTED_CHAIN_IDS = frozenset(
    {ETHEREUM, POLYGON, POLYGON_MUMBAI, ARBITRUM_ONE, BSC, BSC_TESTNET, LUMI_ROLLUP}
)


@dataclass(frozen=True)
class ChainKeyMap(Generic[K]):
    """Lookup table from chain id to a provider-specific key."""

    provider: str
    table: Mapping[int, K]

    def resolve(self, chain_id: int) -> K:
        try:
            return self.table[chain_id]
        except KeyError:
            raise UnsupportedChainError(self.provider, chain_id) from None

    def supports(self, chain_id: int) -> bool:
        return chain_id in self.table


ANKR_CHAINS: ChainKeyMap[str] = ChainKeyMap(
    "ankr",
    {
        ETHEREUM: "eth-mainnet",
        POLYGON: "matic-mainnet",
        POLYGON_MUMBAI: "matic-mumbai",
        ARBITRUM_ONE: "arbitrum",
        BSC: "bsc-mainnet",
        BSC_TESTNET: "bsc-testnet",
    },
)

ALCHEMY_CHAINS: ChainKeyMap[str] = ChainKeyMap(
    "alchemy",
    {
        ARBITRUM_ONE: "arb-mainnet",
    },
)


MORALIS_CHAINS: ChainKeyMap[str] = ChainKeyMap(
    "moralis",
    {
        chain_id: hex(chain_id)
        for chain_id in (ETHEREUM, POLYGON, POLYGON_MUMBAI, ARBITRUM_ONE, BSC, BSC_TESTNET)
    },
)

# Explorer API base URL and the config key holding its API key
EXPLORER_CHAINS: ChainKeyMap[tuple[str, str]] = ChainKeyMap(
    "polygonscan",
    {
        POLYGON: ("https://api.polygonscan.com/api", "polygonscan_api_key"),
        POLYGON_MUMBAI: ("https://api-testnet.polygonscan.com/api", "polygonscan_api_key"),
    },
)

STATIC_TOKEN_LISTS: ChainKeyMap[str] = ChainKeyMap(
    "static",
    {
        POLYGON: "polygon.json",
        POLYGON_MUMBAI: "mumbai.json",
    },
)

ROLLUP_TOKEN_LISTS: ChainKeyMap[str] = ChainKeyMap(
    "rollup",
    {
        LUMI_ROLLUP: "lumi_rollup.json",
    },
)

# Contracts deployed by the rollup operator, bundled because no explorer indexes the rollup
STATIC_CONTRACT_LISTS: ChainKeyMap[str] = ChainKeyMap(
    "static-contracts",
    {
        LUMI_ROLLUP: "lumi_contracts.json",
    },
)


__all__ = [
    "ChainKeyMap",
    "ANKR_CHAINS",
    "ALCHEMY_CHAINS",
    "MORALIS_CHAINS",
    "EXPLORER_CHAINS",
    "STATIC_TOKEN_LISTS",
    "ROLLUP_TOKEN_LISTS",
    "STATIC_CONTRACT_LISTS",
    "SUPPORTED_CHAIN_IDS",
]
