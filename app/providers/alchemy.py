from typing import Any, List

from pydantic import ValidationError

from ..core.chain_keys import ALCHEMY_CHAINS
from ..core.errors import MalformedResponseError
from ..types import TokenBalanceEntry
from .base import BalanceProvider, is_zero_balance


class AlchemyBalanceProvider(BalanceProvider):
    """Alchemy ``alchemy_getTokenBalances`` (ERC-20 only).

    Balances are returned as Alchemy's zero-padded hex strings, unchanged.
    """

    name = "alchemy"

    async def ready(self) -> bool:
        return await self.config.has("alchemy_api_key")

    async def fetch(self, chain_id: int, address: str) -> List[TokenBalanceEntry]:
        slug = ALCHEMY_CHAINS.resolve(chain_id)
        api_key = await self.config.get("alchemy_api_key")
        url = f"https://{slug}.g.alchemy.com/v2/{api_key}"

        result = await self._json_rpc(url, "alchemy_getTokenBalances", [address, "erc20"])
        balances: Any = result.get("tokenBalances") if isinstance(result, dict) else None
        if not isinstance(balances, list):
            raise MalformedResponseError("Alchemy result has no tokenBalances", provider=self.name)

        tokens = []
        try:
            for token_data in balances:
                raw = token_data.get("tokenBalance")
                if is_zero_balance(raw):  # Only include non-zero balances
                    continue
                tokens.append(
                    TokenBalanceEntry(token_address=token_data["contractAddress"], balance=raw)
                )
        except (AttributeError, KeyError, ValidationError) as exc:
            raise MalformedResponseError("Alchemy returned an invalid token balance", provider=self.name) from exc
        return tokens
