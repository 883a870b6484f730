import asyncio
from typing import Any, List, Optional

from ..core.chain_keys import ROLLUP_TOKEN_LISTS, ChainKeyMap
from ..types import TokenBalanceEntry
from .base import BalanceProvider
from .rpc import OnChainCallClient
from .token_list import load_bundled_list


class RollupTokenScanProvider(BalanceProvider):
    """Balances on chains no indexer covers, read with ``balanceOf``.

    Scans the bundled token list for the chain; every token is queried
    concurrently and a single failed call fails the scan.
    """

    name = "rollup"

    def __init__(
        self,
        client: Optional[OnChainCallClient] = None,
        lists: ChainKeyMap[str] = ROLLUP_TOKEN_LISTS,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.client = client or OnChainCallClient(config=self._config, transport=self._transport)
        self.lists = lists

    async def ready(self) -> bool:
        return await self.config.has("rpc_map")

    async def fetch(self, chain_id: int, address: str) -> List[TokenBalanceEntry]:
        tokens = load_bundled_list(self.lists.resolve(chain_id))["tokens"]
        balances = await asyncio.gather(
            *(self.client.balance_of(chain_id, token["address"], address) for token in tokens)
        )
        return [
            TokenBalanceEntry(token_address=token["address"], balance=str(balance))
            for token, balance in zip(tokens, balances)
            if balance > 0
        ]
