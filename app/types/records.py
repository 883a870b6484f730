from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class ContractRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    contract_name: str = Field(alias="contractName", description="Declared contract name")
    abi: List[Dict[str, Any]] = Field(default_factory=list, description="ABI fragment descriptors")
    implementation: str = Field(
        default="",
        description="Implementation address followed when the queried contract is a proxy",
    )
    proxy_name: Optional[str] = Field(
        default=None,
        exclude=True,
        description="Name declared by the outermost proxy, when one was followed",
    )


class TokenBalanceEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token_address: str = Field(alias="tokenAddress", description="ERC-20 contract address")
    balance: str = Field(description="Raw integer balance in the provider's native encoding")


class CenterData(BaseModel):
    logo_uri: Optional[str] = Field(default=None, alias="logoURI", description="Token logo")
    website: Optional[str] = Field(default=None, description="Project website")
    description: Optional[str] = Field(default=None, description="Token description")

    model_config = ConfigDict(populate_by_name=True)


class TokenMetadataRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(description="Token name")
    symbol: str = Field(description="Token symbol")
    address: str = Field(description="Token contract address")
    decimals: int = Field(ge=0, le=255, description="Token decimal places")
    center_data: CenterData = Field(default_factory=CenterData, alias="centerData")

    @classmethod
    def from_token_list(cls, entry: Dict[str, Any]) -> "TokenMetadataRecord":
        """Build a record from a Uniswap-format token list entry."""
        extensions = entry.get("extensions") or {}
        return cls(
            name=entry["name"],
            symbol=entry["symbol"],
            address=entry["address"],
            decimals=entry["decimals"],
            center_data=CenterData(
                logo_uri=entry.get("logoURI"),
                description=extensions.get("description"),
            ),
        )

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
