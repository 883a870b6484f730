from .records import CenterData, ContractRecord, TokenBalanceEntry, TokenMetadataRecord

__all__ = [
    "CenterData",
    "ContractRecord",
    "TokenBalanceEntry",
    "TokenMetadataRecord",
]
