from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from typing import Dict, Any

from ..config import settings
from ..providers.base import describe
from ..services.balances import TokenBalanceAggregator
from ..services.contracts import ContractMetadataResolver
from ..services.token_metadata import TokenMetadataResolver
from .deps import get_balance_aggregator, get_token_metadata_resolver, get_write_abi_resolver

router = APIRouter()


@router.get("/api/checkForUpdate")
async def check_for_update() -> JSONResponse:
    """Current service version, polled by clients"""
    return JSONResponse(content=settings.service_version)


@router.get("/healthz")
async def health_check(
    contracts: ContractMetadataResolver = Depends(get_write_abi_resolver),
    balances: TokenBalanceAggregator = Depends(get_balance_aggregator),
    tokens: TokenMetadataResolver = Depends(get_token_metadata_resolver),
) -> Dict[str, Any]:
    """Configured provider chains and whether each provider has its credentials"""

    chains = {
        "contract": await describe(contracts.providers),
        "balances": await describe(balances.providers),
        "tokenmeta": await describe(tokens.tiers),
    }

    # Every chain needs at least one usable provider
    all_ready = all(
        any(provider["ready"] for provider in providers)
        for providers in chains.values()
    )

    return {
        "status": "healthy" if all_ready else "degraded",
        "providers": chains,
    }
