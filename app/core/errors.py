"""
Resolution Errors

Failures raised by providers while resolving on-chain data.

Every ``ResolverError`` is recoverable from the point of view of a provider
chain: the executor records it and moves on to the next provider. An
authoritative "not found" is not an error at all; providers return ``None``.
"""

from typing import Optional


class ResolverError(Exception):
    """Base class for provider failures that advance a fallback chain."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.provider = provider


class UnsupportedChainError(ResolverError):
    """The provider has no mapping for the requested chain id."""

    def __init__(self, provider: str, chain_id: int):
        super().__init__(
            f"chainId {chain_id} is not supported by {provider}",
            provider=provider,
        )
        self.chain_id = chain_id


class ProviderUnavailableError(ResolverError):
    """Non-2xx status, transport failure or a provider-reported error status."""


class ProviderTimeoutError(ProviderUnavailableError):
    """Provider did not answer before its deadline."""

    def __init__(self, provider: str, timeout_s: float):
        super().__init__(
            f"{provider} did not respond within {timeout_s}s",
            provider=provider,
        )
        self.timeout_s = timeout_s


class CyclicProxyError(ProviderUnavailableError):
    """Proxy implementation chain is longer than the configured depth."""

    def __init__(self, address: str, max_depth: int, provider: Optional[str] = None):
        super().__init__(
            f"Proxy chain starting at {address} exceeds {max_depth} hops",
            provider=provider,
        )
        self.address = address
        self.max_depth = max_depth


class MalformedResponseError(ResolverError):
    """Provider answered with a payload we cannot interpret."""


class TokenNotListedError(ResolverError):
    """Token address is absent from a token list tier."""

    def __init__(self, provider: str, token_address: str):
        super().__init__(
            f"Token {token_address} not found in {provider} token list",
            provider=provider,
        )
        self.token_address = token_address


class MissingConfigError(ResolverError):
    """A named configuration value required by a provider is not set."""

    def __init__(self, name: str):
        super().__init__(f"Missing configuration value: {name}")
        self.name = name


class ProviderChainExhausted(Exception):
    """Every provider in a chain failed; ``latest_error`` is the last failure."""

    def __init__(self, task: str, latest_error: Optional[BaseException] = None):
        detail = str(latest_error) if latest_error is not None else "no providers configured"
        super().__init__(f"All {task} providers failed: {detail}")
        self.task = task
        self.latest_error = latest_error
