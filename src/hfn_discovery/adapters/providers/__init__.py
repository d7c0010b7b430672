"""Search providers."""

from hfn_discovery.adapters.providers.demo_provider import DemoSearchProvider
from hfn_discovery.adapters.providers.http_provider import HttpSearchProvider

__all__ = ["DemoSearchProvider", "HttpSearchProvider"]
