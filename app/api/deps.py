"""FastAPI dependencies providing the resolvers used by the routes."""

from functools import lru_cache

from ..services.balances import TokenBalanceAggregator, build_balance_providers
from ..services.contracts import ContractMetadataResolver, default_contract_providers
from ..services.token_metadata import TokenMetadataResolver, default_token_metadata_tiers


@lru_cache(maxsize=None)
def get_write_abi_resolver() -> ContractMetadataResolver:
    """ABI with constructors and read-only functions removed (``/api/abi``)."""
    return ContractMetadataResolver(
        default_contract_providers(),
        filter_read_only=True,
        preserve_proxy_name=True,
    )


@lru_cache(maxsize=None)
def get_full_abi_resolver() -> ContractMetadataResolver:
    """Complete ABI (``/api/abi3``)."""
    return ContractMetadataResolver(
        default_contract_providers(),
        filter_read_only=False,
        preserve_proxy_name=True,
    )


@lru_cache(maxsize=None)
def get_balance_aggregator() -> TokenBalanceAggregator:
    return TokenBalanceAggregator(build_balance_providers())


@lru_cache(maxsize=None)
def get_token_metadata_resolver() -> TokenMetadataResolver:
    return TokenMetadataResolver(default_token_metadata_tiers())
