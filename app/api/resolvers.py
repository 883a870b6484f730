from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ..services.balances import TokenBalanceAggregator
from ..services.contracts import ContractMetadataResolver
from ..services.token_metadata import TokenMetadataResolver
from .deps import (
    get_balance_aggregator,
    get_full_abi_resolver,
    get_token_metadata_resolver,
    get_write_abi_resolver,
)

router = APIRouter(prefix="/api")

# cache for 24 hours, serve stale for 25
ABI_CACHE_CONTROL = "s-maxage=86400, stale-while-revalidate=90000"
ABI_NOT_FOUND_CACHE_CONTROL = "s-maxage=3600"
ABI_BAD_REQUEST_CACHE_CONTROL = "s-maxage=86400"
# cache for 1 hour, serve stale for 1.5
TOKENMETA_CACHE_CONTROL = "s-maxage=3600, stale-while-revalidate=5400"
BAD_REQUEST_CACHE_CONTROL = "s-maxage=3600"
BALANCES_CACHE_HEADERS = {
    "Cache-Control": "max-age=2",
    "CDN-Cache-Control": "max-age=2",
    "Vercel-CDN-Cache-Control": "max-age=2",
}


def _json(payload: Any, *, status_code: int = 200, cache_control: Optional[str] = None,
          headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    merged = dict(headers or {})
    if cache_control:
        merged["cache-control"] = cache_control
    return JSONResponse(content=payload, status_code=status_code, headers=merged)


def _parse_params(chain_id: Optional[str], address: Optional[str], address_param: str,
                  cache_control: str) -> Tuple[Optional[int], Optional[JSONResponse]]:
    if not chain_id or not address:
        return None, _json(
            {"error": f"Missing chainId or {address_param}"},
            status_code=400,
            cache_control=cache_control,
        )
    try:
        return int(chain_id.strip()), None
    except ValueError:
        return None, _json({"error": "Invalid chainId"}, status_code=400, cache_control=cache_control)


async def _contract_response(resolver: ContractMetadataResolver, chain_id: Optional[str],
                             contract_address: Optional[str]) -> JSONResponse:
    parsed_chain_id, error = _parse_params(
        chain_id, contract_address, "contractAddress", ABI_BAD_REQUEST_CACHE_CONTROL
    )
    if error is not None:
        return error

    record = await resolver.resolve(parsed_chain_id, contract_address)
    if record is None:
        return _json({"error": "Contract not found"}, cache_control=ABI_NOT_FOUND_CACHE_CONTROL)
    return _json(record.model_dump(by_alias=True), cache_control=ABI_CACHE_CONTROL)


@router.get("/abi")
async def get_abi(
    chain_id: Optional[str] = Query(None, alias="chainId", description="Chain id"),
    contract_address: Optional[str] = Query(None, alias="contractAddress", description="Contract address"),
    resolver: ContractMetadataResolver = Depends(get_write_abi_resolver),
) -> JSONResponse:
    """State-changing ABI fragments of a verified contract, following proxies"""
    return await _contract_response(resolver, chain_id, contract_address)


@router.get("/abi3")
async def get_full_abi(
    chain_id: Optional[str] = Query(None, alias="chainId", description="Chain id"),
    contract_address: Optional[str] = Query(None, alias="contractAddress", description="Contract address"),
    resolver: ContractMetadataResolver = Depends(get_full_abi_resolver),
) -> JSONResponse:
    """Full ABI of a verified contract, following proxies"""
    return await _contract_response(resolver, chain_id, contract_address)


@router.get("/balances")
async def get_balances(
    chain_id: Optional[str] = Query(None, alias="chainId", description="Chain id"),
    wallet_address: Optional[str] = Query(None, alias="walletAddress", description="Wallet address"),
    aggregator: TokenBalanceAggregator = Depends(get_balance_aggregator),
) -> JSONResponse:
    """Non-zero ERC-20 balances; degrades to an empty list when providers fail"""
    parsed_chain_id, error = _parse_params(
        chain_id, wallet_address, "walletAddress", BAD_REQUEST_CACHE_CONTROL
    )
    if error is not None:
        return error

    balances = await aggregator.get_balances(parsed_chain_id, wallet_address)
    return _json(
        [entry.model_dump(by_alias=True) for entry in balances],
        headers=BALANCES_CACHE_HEADERS,
    )


@router.get("/tokenmeta")
async def get_token_metadata(
    chain_id: Optional[str] = Query(None, alias="chainId", description="Chain id"),
    token_address: Optional[str] = Query(None, alias="tokenAddress", description="Token address"),
    resolver: TokenMetadataResolver = Depends(get_token_metadata_resolver),
) -> JSONResponse:
    """ERC-20 name, symbol and decimals"""
    parsed_chain_id, error = _parse_params(
        chain_id, token_address, "tokenAddress", BAD_REQUEST_CACHE_CONTROL
    )
    if error is not None:
        return error

    record = await resolver.resolve(parsed_chain_id, token_address)
    return _json(record.to_payload(), cache_control=TOKENMETA_CACHE_CONTROL)
