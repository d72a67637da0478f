import logging
import random
import string
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

from jobsweep.config.settings import settings
from jobsweep.core.models import ProxyCredential

logger = logging.getLogger(__name__)

SESSION_MARKER = "-session-"
COUNTRY_MARKER = "-country-"


def sticky_username(
    username: str,
    country: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """
    Pin every request of one attempt to one upstream exit by appending a fresh
    session id, plus a country qualifier when the username has none.
    """
    rng = rng or random.Random()
    out = username
    if SESSION_MARKER not in out:
        suffix = "".join(rng.choices(string.ascii_lowercase + string.digits, k=10))
        out = f"{out}{SESSION_MARKER}{suffix}"
    if country and COUNTRY_MARKER not in out:
        out = f"{out}{COUNTRY_MARKER}{country.lower()}"
    return out


class ProxyPool:
    """
    Read-only rotation pool. Entry i is reused by attempts i, i + n, i + 2n...,
    each time under a new sticky session so upstream exits still differ.
    """

    def __init__(
        self,
        entries: Sequence[ProxyCredential],
        default_country: Optional[str] = settings.PROXY_COUNTRY,
        rng: Optional[random.Random] = None,
    ):
        self._entries = tuple(entries)
        self._default_country = default_country
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    @property
    def entries(self) -> List[ProxyCredential]:
        return list(self._entries)

    def pick(self, attempt: int) -> Optional[ProxyCredential]:
        """Credential for the given attempt index, or None for an empty pool."""
        if not self._entries:
            return None

        base = self._entries[attempt % len(self._entries)]
        if not base.username:
            return base

        country = base.country or self._default_country
        username = sticky_username(base.username, country, self._rng)
        session = username.split(SESSION_MARKER, 1)[1].split("-", 1)[0]
        return base.model_copy(
            update={"username": username, "country": country, "session": session}
        )


class ProxyProvider(ABC):
    """
    Abstract base class for proxy providers.
    Each provider builds its rotation pool from settings.
    """

    @abstractmethod
    def get_pool(self) -> ProxyPool:
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Returns the display name of this proxy provider."""


class NoProxyProvider(ProxyProvider):
    """Provider that explicitly disables proxy usage."""

    def get_pool(self) -> ProxyPool:
        logger.info("No proxy configured")
        return ProxyPool([])

    def get_name(self) -> str:
        return "No Proxy"


class GenericProxyProvider(ProxyProvider):
    """
    Single HTTP/SOCKS proxy with optional authentication.
    Requires PROXY_SERVER; PROXY_USERNAME and PROXY_PASSWORD are optional.
    """

    def get_pool(self) -> ProxyPool:
        if not settings.PROXY_SERVER:
            logger.warning("PROXY_SERVER not found. Cannot use generic proxy.")
            return ProxyPool([])

        logger.info(f"Using Generic Proxy: {settings.PROXY_SERVER}")
        return ProxyPool(
            [
                ProxyCredential(
                    server=settings.PROXY_SERVER,
                    username=settings.PROXY_USERNAME,
                    password=settings.PROXY_PASSWORD,
                )
            ]
        )

    def get_name(self) -> str:
        return "Generic Proxy"


class PoolProxyProvider(ProxyProvider):
    """
    Rotating residential pool.
    Requires PROXY_POOL, a JSON list of {"server", "username", "password"} entries.
    """

    def get_pool(self) -> ProxyPool:
        if not settings.PROXY_POOL:
            logger.warning("PROXY_POOL is empty. Cannot use proxy pool.")
            return ProxyPool([])

        logger.info(f"Using Proxy Pool with {len(settings.PROXY_POOL)} entries")
        return ProxyPool(settings.PROXY_POOL)

    def get_name(self) -> str:
        return "Proxy Pool"


# Provider registry: maps provider names to their classes
PROXY_PROVIDERS: Dict[str, type[ProxyProvider]] = {
    "none": NoProxyProvider,
    "generic": GenericProxyProvider,
    "pool": PoolProxyProvider,
}


def get_proxy_pool(provider_name: Optional[str] = None) -> ProxyPool:
    """
    Build the proxy rotation pool for the configured PROXY_PROVIDER.

    Supported providers (set via PROXY_PROVIDER env var):
        - 'none': No proxy (default)
        - 'generic': One HTTP/SOCKS proxy (requires PROXY_SERVER)
        - 'pool': Rotating pool (requires PROXY_POOL)
    """
    provider_name = (provider_name or settings.PROXY_PROVIDER).lower()

    provider_class = PROXY_PROVIDERS.get(provider_name)

    if not provider_class:
        logger.error(
            f"Unknown proxy provider: '{provider_name}'. "
            f"Available providers: {', '.join(PROXY_PROVIDERS.keys())}"
        )
        logger.warning("Falling back to no proxy.")
        return ProxyPool([])

    return provider_class().get_pool()
