"""Contract ABIs bundled with the service for chains no explorer covers.

Each file maps a lowercase contract address to an explorer-shaped row:
``{"ContractName": ..., "ABI": [...], "Implementation": ""}``.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..config import DATA_DIR
from ..core.chain_keys import STATIC_CONTRACT_LISTS, ChainKeyMap
from ..core.errors import MalformedResponseError
from ..types import ContractRecord
from .base import ContractSourceProvider

logger = logging.getLogger(__name__)

CONTRACT_LIST_DIR = DATA_DIR / "contracts"


@lru_cache(maxsize=None)
def load_contract_list(filename: str) -> Dict[str, Dict[str, Any]]:
    with open(CONTRACT_LIST_DIR / filename, encoding="utf-8") as f:
        contracts = json.load(f)
    return {address.lower(): entry for address, entry in contracts.items()}


class StaticContractListProvider(ContractSourceProvider):
    """Bundled contract table; answers before any explorer is asked"""

    name = "static-contracts"

    def __init__(self, lists: ChainKeyMap[str] = STATIC_CONTRACT_LISTS, **kwargs: Any):
        super().__init__(**kwargs)
        self.lists = lists

    async def fetch_source(self, chain_id: int, address: str) -> Optional[ContractRecord]:
        contracts = load_contract_list(self.lists.resolve(chain_id))
        entry = contracts.get(address.lower())
        if entry is None:
            logger.debug("Contract %s is not bundled for chain %s", address, chain_id)
            return None

        try:
            return ContractRecord(
                contract_name=entry.get("ContractName") or "",
                abi=entry.get("ABI") or [],
                implementation=(entry.get("Implementation") or "").strip(),
            )
        except ValidationError as exc:
            raise MalformedResponseError(
                f"Bundled ABI for {address} is invalid", provider=self.name
            ) from exc


__all__ = ["StaticContractListProvider", "load_contract_list"]
