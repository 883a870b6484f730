from pathlib import Path
from typing import Dict, List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]
DATA_DIR = Path(__file__).resolve().parent / "data"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="auto", description="Log renderer: json, console or auto")
    service_version: str = Field(default="1.0.0", description="Version reported by /api/checkForUpdate")

    # External credentials (read through ConfigStore, never used directly by providers)
    polygonscan_api_key: str = Field(default="", description="Polygonscan API key")
    alchemy_api_key: str = Field(default="", description="Alchemy API key")
    ankr_api_url: str = Field(default="", description="Ankr advanced API endpoint (key embedded in URL)")
    moralis_api_key: str = Field(default="", description="Moralis deep-index API key")
    rpc_map: Dict[int, str] = Field(
        default_factory=dict,
        description="JSON-RPC endpoint per chain id, used for eth_call",
    )

    # Remote key/value configuration document; overrides the values above by name
    edge_config_url: str = Field(
        default="",
        description="URL of a JSON object whose keys override credential settings",
    )

    # Resolution behaviour
    provider_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Deadline applied to each provider call in a fallback chain",
    )
    max_proxy_depth: int = Field(
        default=4,
        ge=1,
        description="Maximum number of proxy hops followed when resolving a contract ABI",
    )
    token_list_cache_ttl_seconds: int = Field(
        default=0,
        ge=0,
        description="TTL for cached remote token lists; 0 keeps them for the process lifetime",
    )
    balance_providers: List[str] = Field(
        default_factory=lambda: ["ankr", "alchemy", "moralis", "rollup"],
        description="Ordered balance providers; earlier entries are preferred",
    )
    remote_token_lists: Dict[int, List[str]] = Field(
        default_factory=lambda: {
            80001: [
                "https://api-polygon-tokens.polygon.technology/tokenlists/testnet.tokenlist.json",
            ],
            137: [
                "https://api-polygon-tokens.polygon.technology/tokenlists/polygonTokens.tokenlist.json",
            ],
        },
        description="Third-party token list documents per chain, scanned in order",
    )
    moralis_base_url: str = Field(
        default="https://deep-index.moralis.io/api/v2.2",
        description="Base URL for the Moralis deep-index API",
    )

    @property
    def has_edge_config(self) -> bool:
        return bool(self.edge_config_url)


# Global settings instance
settings = Settings()
