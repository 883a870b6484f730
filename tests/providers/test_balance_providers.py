"""
Tests for the wallet balance providers and their normalization rules.
"""

import json

import httpx
import pytest
from eth_abi import encode

from app.core.errors import (
    MalformedResponseError,
    MissingConfigError,
    ProviderUnavailableError,
    UnsupportedChainError,
)
from app.providers.alchemy import AlchemyBalanceProvider
from app.providers.ankr import AnkrBalanceProvider
from app.providers.base import is_zero_balance
from app.providers.moralis import MoralisBalanceProvider
from app.providers.rollup import RollupTokenScanProvider
from app.providers.token_list import load_bundled_list

WALLET = "0x95222290DD7278Aa3Ddd389Cc1E1d165CC4BAfe5"
USDC = "0x3c499c542cEF5E3811e1192ce70d8cC03d5c3359"
WETH = "0x7ceB23fD6bC0adD59E62ac25578270cFf1b9f619"


def rpc_result(result):
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": result})


@pytest.mark.parametrize(
    "raw,expected",
    [
        (None, True),
        ("0", True),
        ("0x", True),
        ("0x0000000000000000000000000000000000000000000000000000000000000000", True),
        ("000", True),
        ("1", False),
        ("0x01", False),
        ("1000000", False),
    ],
)
def test_is_zero_balance(raw, expected):
    assert is_zero_balance(raw) is expected


class TestAnkrBalanceProvider:

    @pytest.mark.asyncio
    async def test_native_and_zero_entries_are_dropped(self, config_store, make_transport, recorded_requests):
        assets = [
            {"tokenType": "NATIVE", "contractAddress": "", "balanceRawInteger": "5000"},
            {"tokenType": "ERC20", "contractAddress": USDC, "balanceRawInteger": "1500000"},
            {"tokenType": "ERC20", "contractAddress": WETH, "balanceRawInteger": "0"},
        ]
        provider = AnkrBalanceProvider(
            config=config_store,
            transport=make_transport(lambda request: rpc_result({"assets": assets})),
        )

        entries = await provider.fetch(137, WALLET)

        assert [e.model_dump(by_alias=True) for e in entries] == [
            {"tokenAddress": USDC, "balance": "1500000"}
        ]
        request = recorded_requests[0]
        assert request.url.host == "rpc.ankr.example"
        body = json.loads(request.content)
        assert body["method"] == "ankr_getAccountBalance"
        assert body["params"] == {
            "blockchain": "matic-mainnet",
            "walletAddress": WALLET,
            "onlyWhitelisted": False,
        }

    @pytest.mark.asyncio
    async def test_rollup_chain_is_unsupported(self, config_store, make_transport, recorded_requests):
        provider = AnkrBalanceProvider(config=config_store, transport=make_transport(rpc_result))

        with pytest.raises(UnsupportedChainError):
            await provider.fetch(94168, WALLET)
        assert recorded_requests == []

    @pytest.mark.asyncio
    async def test_missing_assets_is_malformed(self, config_store, make_transport):
        provider = AnkrBalanceProvider(
            config=config_store,
            transport=make_transport(lambda request: rpc_result({"totalBalanceUsd": "0"})),
        )

        with pytest.raises(MalformedResponseError):
            await provider.fetch(1, WALLET)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "asset",
        [
            {"tokenType": "ERC20", "balanceRawInteger": "1500000"},
            "USDC",
        ],
    )
    async def test_invalid_asset_is_malformed(self, config_store, make_transport, asset):
        provider = AnkrBalanceProvider(
            config=config_store,
            transport=make_transport(lambda request: rpc_result({"assets": [asset]})),
        )

        with pytest.raises(MalformedResponseError) as exc_info:
            await provider.fetch(137, WALLET)

        assert exc_info.value.provider == "ankr"


class TestAlchemyBalanceProvider:

    @pytest.mark.asyncio
    async def test_hex_balances_are_kept_verbatim(self, config_store, make_transport, recorded_requests):
        padded = "0x" + "0" * 58 + "05f5e1"
        balances = [
            {"contractAddress": USDC, "tokenBalance": padded},
            {"contractAddress": WETH, "tokenBalance": "0x" + "0" * 64},
        ]
        provider = AlchemyBalanceProvider(
            config=config_store,
            transport=make_transport(lambda request: rpc_result({"address": WALLET, "tokenBalances": balances})),
        )

        entries = await provider.fetch(42161, WALLET)

        assert len(entries) == 1
        assert entries[0].token_address == USDC
        assert entries[0].balance == padded

        request = recorded_requests[0]
        assert str(request.url) == "https://arb-mainnet.g.alchemy.com/v2/alchemy-key"
        body = json.loads(request.content)
        assert body["method"] == "alchemy_getTokenBalances"
        assert body["params"] == [WALLET, "erc20"]

    @pytest.mark.asyncio
    async def test_only_arbitrum_is_mapped(self, config_store, make_transport):
        provider = AlchemyBalanceProvider(config=config_store, transport=make_transport(rpc_result))

        with pytest.raises(UnsupportedChainError):
            await provider.fetch(137, WALLET)

    @pytest.mark.asyncio
    async def test_rpc_error_is_provider_failure(self, config_store, make_transport):
        def handler(request):
            return httpx.Response(
                200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": 429, "message": "rate limited"}}
            )

        provider = AlchemyBalanceProvider(config=config_store, transport=make_transport(handler))

        with pytest.raises(ProviderUnavailableError):
            await provider.fetch(42161, WALLET)

    @pytest.mark.asyncio
    async def test_entry_without_contract_address_is_malformed(self, config_store, make_transport):
        balances = [{"tokenBalance": "0x0a"}]
        provider = AlchemyBalanceProvider(
            config=config_store,
            transport=make_transport(lambda request: rpc_result({"tokenBalances": balances})),
        )

        with pytest.raises(MalformedResponseError) as exc_info:
            await provider.fetch(42161, WALLET)

        assert exc_info.value.provider == "alchemy"


class TestMoralisBalanceProvider:

    @pytest.mark.asyncio
    async def test_list_response(self, config_store, make_transport, recorded_requests):
        tokens = [
            {"token_address": USDC, "balance": "2500000", "native_token": False},
            {"token_address": WETH, "balance": "0"},
            {"token_address": "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee", "balance": "9", "native_token": True},
        ]
        provider = MoralisBalanceProvider(
            config=config_store,
            transport=make_transport(lambda request: httpx.Response(200, json=tokens)),
        )

        entries = await provider.fetch(137, WALLET)

        assert [(e.token_address, e.balance) for e in entries] == [(USDC, "2500000")]
        request = recorded_requests[0]
        assert request.url.path.endswith(f"/{WALLET}/erc20")
        assert request.url.params["chain"] == "0x89"
        assert request.headers["X-API-Key"] == "moralis-key"

    @pytest.mark.asyncio
    async def test_wrapped_result_response(self, config_store, make_transport):
        body = {"result": [{"token_address": USDC, "balance": "7"}]}
        provider = MoralisBalanceProvider(
            config=config_store,
            transport=make_transport(lambda request: httpx.Response(200, json=body)),
        )

        entries = await provider.fetch(42161, WALLET)

        assert entries[0].balance == "7"

    @pytest.mark.asyncio
    async def test_token_without_address_is_malformed(self, config_store, make_transport):
        tokens = [{"symbol": "USDC", "balance": "2500000"}]
        provider = MoralisBalanceProvider(
            config=config_store,
            transport=make_transport(lambda request: httpx.Response(200, json=tokens)),
        )

        with pytest.raises(MalformedResponseError) as exc_info:
            await provider.fetch(137, WALLET)

        assert exc_info.value.provider == "moralis"

    @pytest.mark.asyncio
    async def test_missing_key_raises_missing_config(self, config_store, make_transport, test_settings):
        test_settings.moralis_api_key = ""
        provider = MoralisBalanceProvider(config=config_store, transport=make_transport(rpc_result))

        assert await provider.ready() is False
        with pytest.raises(MissingConfigError):
            await provider.fetch(137, WALLET)


class TestRollupTokenScanProvider:

    @pytest.mark.asyncio
    async def test_scans_bundled_list_with_balance_of(self, config_store, make_transport, recorded_requests):
        tokens = load_bundled_list("lumi_rollup.json")["tokens"]
        funded = tokens[1]["address"].lower()

        def handler(request):
            call = json.loads(request.content)["params"][0]
            amount = 42 if call["to"].lower() == funded else 0
            return rpc_result("0x" + encode(["uint256"], [amount]).hex())

        provider = RollupTokenScanProvider(config=config_store, transport=make_transport(handler))

        entries = await provider.fetch(94168, WALLET)

        assert [(e.token_address.lower(), e.balance) for e in entries] == [(funded, "42")]
        assert len(recorded_requests) == len(tokens)

    @pytest.mark.asyncio
    async def test_indexed_chains_are_unsupported(self, config_store, make_transport):
        provider = RollupTokenScanProvider(config=config_store, transport=make_transport(rpc_result))

        with pytest.raises(UnsupportedChainError):
            await provider.fetch(137, WALLET)
