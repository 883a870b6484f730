"""Token balance aggregation across balance-indexing providers."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence

from ..config import settings
from ..core.errors import ProviderChainExhausted
from ..core.fallback import run_provider_chain
from ..providers.alchemy import AlchemyBalanceProvider
from ..providers.ankr import AnkrBalanceProvider
from ..providers.base import BalanceProvider
from ..providers.moralis import MoralisBalanceProvider
from ..providers.rollup import RollupTokenScanProvider
from ..types import TokenBalanceEntry

logger = logging.getLogger(__name__)

BALANCE_PROVIDERS: Dict[str, Callable[[], BalanceProvider]] = {
    "ankr": AnkrBalanceProvider,
    "alchemy": AlchemyBalanceProvider,
    "moralis": MoralisBalanceProvider,
    "rollup": RollupTokenScanProvider,
}


def build_balance_providers(names: Optional[Sequence[str]] = None) -> List[BalanceProvider]:
    """Instantiate balance providers in the configured order.

    Unknown names are skipped with a warning so a typo in deployment config
    does not take the endpoint down.
    """
    providers = []
    for name in names if names is not None else settings.balance_providers:
        factory = BALANCE_PROVIDERS.get(name.strip().lower())
        if factory is None:
            logger.warning("Unknown balance provider %r in configuration", name)
            continue
        providers.append(factory())
    return providers


class TokenBalanceAggregator:
    """ERC-20 holdings of a wallet from the first balance provider that answers."""

    def __init__(self, providers: Sequence[BalanceProvider]):
        self.providers = list(providers)

    async def get_balances(self, chain_id: int, wallet_address: str) -> List[TokenBalanceEntry]:
        """Never raises on provider failure; total failure yields ``[]``."""
        try:
            result = await run_provider_chain("balances", self.providers, chain_id, wallet_address)
        except ProviderChainExhausted as exc:
            logger.warning(
                "All balance providers failed for chain %s wallet %s",
                chain_id,
                wallet_address,
                exc_info=exc.latest_error,
            )
            return []
        return result or []


__all__ = ["TokenBalanceAggregator", "build_balance_providers", "BALANCE_PROVIDERS"]
