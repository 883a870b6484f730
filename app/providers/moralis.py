from typing import List

from pydantic import ValidationError

from ..config import settings
from ..core.chain_keys import MORALIS_CHAINS
from ..core.errors import MalformedResponseError
from ..types import TokenBalanceEntry
from .base import BalanceProvider, is_zero_balance


class MoralisBalanceProvider(BalanceProvider):
    """Moralis deep-index ``GET /{address}/erc20`` (chains as hex ids)"""

    name = "moralis"

    async def ready(self) -> bool:
        return await self.config.has("moralis_api_key")

    async def fetch(self, chain_id: int, address: str) -> List[TokenBalanceEntry]:
        chain = MORALIS_CHAINS.resolve(chain_id)
        api_key = await self.config.get("moralis_api_key")

        data = await self._request_json(
            "GET",
            f"{settings.moralis_base_url}/{address}/erc20",
            params={"chain": chain},
            headers={"accept": "application/json", "X-API-Key": api_key},
        )
        # v2.2 returns a bare list; newer revisions wrap it in {"result": [...]}
        if isinstance(data, dict):
            data = data.get("result")
        if not isinstance(data, list):
            raise MalformedResponseError("Moralis response is not a token list", provider=self.name)

        try:
            return [
                TokenBalanceEntry(token_address=token["token_address"], balance=str(token["balance"]))
                for token in data
                if not token.get("native_token") and not is_zero_balance(str(token.get("balance", "0")))
            ]
        except (AttributeError, KeyError, ValidationError) as exc:
            raise MalformedResponseError("Moralis returned an invalid token", provider=self.name) from exc
