"""
Ordered provider fallback.

``run_provider_chain`` tries providers one after another and returns the first
answer. Providers are never run concurrently: once one answers, the rest are
not contacted at all.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence, TypeVar

from ..config import settings
from .errors import ProviderChainExhausted, ProviderTimeoutError, ResolverError

logger = logging.getLogger(__name__)

R = TypeVar("R")


async def _call_with_deadline(provider, chain_id: int, address: str, timeout_s: float):
    try:
        return await asyncio.wait_for(provider.fetch(chain_id, address), timeout=timeout_s)
    except asyncio.TimeoutError:
        raise ProviderTimeoutError(provider.name, timeout_s) from None


async def run_provider_chain(
    task: str,
    providers: Sequence,
    chain_id: int,
    address: str,
    *,
    timeout_s: Optional[float] = None,
) -> Optional[R]:
    """Return the first provider answer for ``(chain_id, address)``.

    A provider returning ``None`` is an authoritative "not found" and ends the
    chain like any other answer. Any exception advances to the next provider;
    unexpected ones (not ``ResolverError``) are logged with a traceback. Only
    the latest failure is kept.

    Raises:
        ProviderChainExhausted: every provider failed.
    """
    latest_error: Optional[BaseException] = None

    for provider in providers:
        deadline = provider.timeout_s or timeout_s or settings.provider_timeout_seconds
        try:
            result = await _call_with_deadline(provider, chain_id, address, deadline)
        except ResolverError as exc:
            latest_error = exc
            logger.debug(
                "%s provider %s failed for chain %s: %s", task, provider.name, chain_id, exc
            )
            continue
        except Exception as exc:  # noqa: BLE001
            latest_error = exc
            logger.warning(
                "%s provider %s raised unexpectedly for chain %s",
                task,
                provider.name,
                chain_id,
                exc_info=exc,
            )
            continue

        logger.debug(
            "%s resolved by %s for chain %s (found=%s)",
            task,
            provider.name,
            chain_id,
            result is not None,
        )
        return result

    raise ProviderChainExhausted(task, latest_error)


__all__ = ["run_provider_chain"]
