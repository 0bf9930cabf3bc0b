"""Client settings."""

import os
from dataclasses import dataclass, field
from typing import Self

DEFAULT_PROXY_URL = "http://localhost:9080"
DEFAULT_TIMEOUT = 30.0


@dataclass
class ClientSettings:
    """Where and how to reach the backend.

    Attributes:
        proxy_url: Base URL of the default proxy
        timeout: Request timeout in seconds
        node_proxies: Roster node address -> proxy URL of that node
    """
    proxy_url: str = DEFAULT_PROXY_URL
    timeout: float = DEFAULT_TIMEOUT
    node_proxies: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self.proxy_url = self.proxy_url.rstrip("/")
        self.timeout = float(self.timeout)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Self:
        """Read EVOTING_PROXY_URL and EVOTING_TIMEOUT, with defaults."""
        environ = os.environ if environ is None else environ
        return cls(
            proxy_url=environ.get("EVOTING_PROXY_URL", DEFAULT_PROXY_URL),
            timeout=float(environ.get("EVOTING_TIMEOUT", DEFAULT_TIMEOUT)),
        )

    def proxy_for(self, node: str) -> str:
        """Proxy URL of a roster node, falling back to the default proxy."""
        return self.node_proxies.get(node, self.proxy_url).rstrip("/")
