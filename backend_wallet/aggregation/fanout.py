"""Concurrent per-network fan-out with gather-all, tolerate-partial-failure semantics."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Sequence, TypeVar

from backend_wallet.core.exceptions import (
    ConfigurationError,
    UpstreamPartialFailure,
    UpstreamTotalFailure,
)
from backend_wallet.networks.registry import NetworkDescriptor
from backend_wallet.wallet_logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def fan_out(
    operation: str,
    networks: Sequence[NetworkDescriptor],
    fetch: Callable[[NetworkDescriptor], Awaitable[T]],
) -> tuple[list[tuple[NetworkDescriptor, T]], list[UpstreamPartialFailure]]:
    """
    Run fetch(network) for every network concurrently; never cancel siblings.

    Returns (successes, failures). Raises UpstreamTotalFailure when every
    network failed, and re-raises ConfigurationError as-is (missing keys are
    not a per-network problem).
    """
    results = await asyncio.gather(*(fetch(n) for n in networks), return_exceptions=True)
    successes: list[tuple[NetworkDescriptor, T]] = []
    failures: list[UpstreamPartialFailure] = []
    for network, result in zip(networks, results):
        if isinstance(result, ConfigurationError):
            raise result
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            failure = UpstreamPartialFailure(network.id, result)
            failures.append(failure)
            logger.warning(
                "network_fetch_failed",
                operation=operation,
                network=network.id,
                error=str(result),
                error_type=type(result).__name__,
            )
            continue
        successes.append((network, result))
    if networks and not successes:
        raise UpstreamTotalFailure(operation, failures)
    return successes, failures
