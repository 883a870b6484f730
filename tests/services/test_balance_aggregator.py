import logging

import httpx
import pytest

from app.core.errors import ProviderUnavailableError, UnsupportedChainError
from app.providers.alchemy import AlchemyBalanceProvider
from app.providers.ankr import AnkrBalanceProvider
from app.providers.moralis import MoralisBalanceProvider
from app.providers.rollup import RollupTokenScanProvider
from app.services.balances import TokenBalanceAggregator, build_balance_providers
from app.types import TokenBalanceEntry

WALLET = "0x95222290DD7278Aa3Ddd389Cc1E1d165CC4BAfe5"
TOKEN = "0xaf88d065e77c8cC2239327C5EDb3A432268e5831"


class StubBalances:
    name = "stub"
    timeout_s = None

    def __init__(self, name, entries=None, error=None):
        self.name = name
        self.entries = entries
        self.error = error
        self.calls = 0

    async def fetch(self, chain_id, address):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.entries


def test_build_balance_providers_follows_configured_order():
    providers = build_balance_providers(["moralis", "Ankr", "rollup"])

    assert [type(p) for p in providers] == [
        MoralisBalanceProvider,
        AnkrBalanceProvider,
        RollupTokenScanProvider,
    ]


def test_build_balance_providers_skips_unknown_names(caplog):
    with caplog.at_level(logging.WARNING):
        providers = build_balance_providers(["covalent", "alchemy"])

    assert [type(p) for p in providers] == [AlchemyBalanceProvider]
    assert "covalent" in caplog.text


def test_default_balance_providers():
    assert [p.name for p in build_balance_providers()] == ["ankr", "alchemy", "moralis", "rollup"]


@pytest.mark.asyncio
async def test_first_answer_wins():
    entries = [TokenBalanceEntry(token_address=TOKEN, balance="10")]
    first = StubBalances("first", error=UnsupportedChainError("first", 42161))
    second = StubBalances("second", entries=entries)
    third = StubBalances("third", entries=[])

    result = await TokenBalanceAggregator([first, second, third]).get_balances(42161, WALLET)

    assert result == entries
    assert third.calls == 0


@pytest.mark.asyncio
async def test_empty_answer_is_authoritative():
    first = StubBalances("first", entries=[])
    second = StubBalances("second", entries=[TokenBalanceEntry(token_address=TOKEN, balance="1")])

    assert await TokenBalanceAggregator([first, second]).get_balances(137, WALLET) == []
    assert second.calls == 0


@pytest.mark.asyncio
async def test_total_failure_returns_empty_list(caplog):
    providers = [
        StubBalances("a", error=ProviderUnavailableError("a down")),
        StubBalances("b", error=ProviderUnavailableError("b down")),
    ]

    with caplog.at_level(logging.WARNING):
        result = await TokenBalanceAggregator(providers).get_balances(137, WALLET)

    assert result == []
    assert "All balance providers failed" in caplog.text


@pytest.mark.asyncio
async def test_arbitrum_wallet_falls_through_to_alchemy(config_store, make_transport, recorded_requests):
    def handler(request):
        if request.url.host == "rpc.ankr.example":
            return httpx.Response(503)
        return httpx.Response(
            200,
            json={
                "jsonrpc": "2.0",
                "id": 1,
                "result": {"tokenBalances": [{"contractAddress": TOKEN, "tokenBalance": "0x0a"}]},
            },
        )

    transport = make_transport(handler)
    aggregator = TokenBalanceAggregator(
        [
            AnkrBalanceProvider(config=config_store, transport=transport),
            AlchemyBalanceProvider(config=config_store, transport=transport),
        ]
    )

    result = await aggregator.get_balances(42161, WALLET)

    assert [e.model_dump(by_alias=True) for e in result] == [{"tokenAddress": TOKEN, "balance": "0x0a"}]
    assert [r.url.host for r in recorded_requests] == ["rpc.ankr.example", "arb-mainnet.g.alchemy.com"]


@pytest.mark.asyncio
async def test_mumbai_network_errors_degrade_to_empty(config_store, make_transport, recorded_requests):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    transport = make_transport(handler)
    aggregator = TokenBalanceAggregator(
        [
            AnkrBalanceProvider(config=config_store, transport=transport),
            AlchemyBalanceProvider(config=config_store, transport=transport),
            MoralisBalanceProvider(config=config_store, transport=transport),
            RollupTokenScanProvider(config=config_store, transport=transport),
        ]
    )

    assert await aggregator.get_balances(80001, WALLET) == []
    # alchemy and the rollup scanner have no mapping for Mumbai
    assert [r.url.host for r in recorded_requests] == ["rpc.ankr.example", "deep-index.moralis.io"]
