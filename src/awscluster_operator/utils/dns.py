"""
DNS resolution probe for the API server load balancer.
"""

import asyncio
import logging
import socket
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

DNSResolver = Callable[[str], Awaitable[bool]]


async def resolve_dns_name(hostname: str, timeout: float = 5.0) -> bool:
    """
    Check whether a hostname currently resolves to at least one address.

    Args:
        hostname: DNS name to look up
        timeout: Maximum time to wait for the resolver, in seconds

    Returns:
        True if the name resolved, False otherwise
    """
    loop = asyncio.get_running_loop()
    try:
        addresses = await asyncio.wait_for(
            loop.getaddrinfo(hostname, None, type=socket.SOCK_STREAM),
            timeout=timeout,
        )
    except (TimeoutError, OSError, ValueError) as e:
        logger.debug(f"DNS name {hostname} does not resolve yet: {e}")
        return False
    return bool(addresses)


def make_dns_resolver(timeout: float) -> DNSResolver:
    """Bind a timeout to the resolver so it matches the DNSResolver signature."""

    async def resolver(hostname: str) -> bool:
        return await resolve_dns_name(hostname, timeout=timeout)

    return resolver
