from typing import Any, List

from pydantic import ValidationError

from ..core.chain_keys import ANKR_CHAINS
from ..core.errors import MalformedResponseError
from ..types import TokenBalanceEntry
from .base import BalanceProvider, is_zero_balance


class AnkrBalanceProvider(BalanceProvider):
    """Ankr advanced API ``ankr_getAccountBalance``.

    Ankr also reports the chain's gas token (``tokenType == "NATIVE"``); that
    entry is dropped along with zero balances.
    """

    name = "ankr"

    async def ready(self) -> bool:
        return await self.config.has("ankr_api_url")

    async def fetch(self, chain_id: int, address: str) -> List[TokenBalanceEntry]:
        blockchain = ANKR_CHAINS.resolve(chain_id)
        url = await self.config.get("ankr_api_url")

        result = await self._json_rpc(
            url,
            "ankr_getAccountBalance",
            {
                "blockchain": blockchain,
                "walletAddress": address,
                "onlyWhitelisted": False,
            },
        )
        assets: Any = result.get("assets") if isinstance(result, dict) else None
        if not isinstance(assets, list):
            raise MalformedResponseError("Ankr result has no assets", provider=self.name)

        try:
            return [
                TokenBalanceEntry(token_address=asset["contractAddress"], balance=asset["balanceRawInteger"])
                for asset in assets
                if asset.get("tokenType") != "NATIVE" and not is_zero_balance(asset.get("balanceRawInteger"))
            ]
        except (AttributeError, KeyError, ValidationError) as exc:
            raise MalformedResponseError("Ankr returned an invalid asset", provider=self.name) from exc
