import httpx
import pytest

from app.config import Settings
from app.services.config_store import ConfigStore

POLYGON_RPC = "https://polygon-rpc.example"
MUMBAI_RPC = "https://mumbai-rpc.example"
ROLLUP_RPC = "https://lumi-rpc.example"
ANKR_URL = "https://rpc.ankr.example/multichain/test-key"


@pytest.fixture
def test_settings():
    return Settings(
        polygonscan_api_key="scan-key",
        alchemy_api_key="alchemy-key",
        ankr_api_url=ANKR_URL,
        moralis_api_key="moralis-key",
        rpc_map={137: POLYGON_RPC, 80001: MUMBAI_RPC, 94168: ROLLUP_RPC},
        edge_config_url="",
    )


@pytest.fixture
def config_store(test_settings):
    return ConfigStore(test_settings)


@pytest.fixture
def recorded_requests():
    return []


@pytest.fixture
def make_transport(recorded_requests):
    """Build an httpx.MockTransport from a handler, recording every request."""

    def factory(handler):
        def recording(request: httpx.Request) -> httpx.Response:
            recorded_requests.append(request)
            return handler(request)

        return httpx.MockTransport(recording)

    return factory