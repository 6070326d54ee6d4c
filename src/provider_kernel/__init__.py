# provider_kernel/__init__.py
"""
provider_kernel
──────────────────────────────────────────────────────────────
A small DI kernel with provider auto-discovery.
Provides:
    - Container, tokens & provider descriptors
    - Auto-discovery of registry files (locate → activate → diff)
    - Registry snapshots & registration formatting for diagnostics
    - FastAPI app factory with diagnostics endpoints
──────────────────────────────────────────────────────────────
"""

__version__ = "0.3.0"

from provider_kernel.autodiscover import (
    DiscoveryRequest,
    DiscoveryResult,
    auto_register,
    discover,
    find_source_files,
)
from provider_kernel.di.registry import Container, container, register, registry, resolve
from provider_kernel.di.tokens import Marker
from provider_kernel.web.api import create_app

__all__ = [
    "Container",
    "DiscoveryRequest",
    "DiscoveryResult",
    "Marker",
    "auto_register",
    "container",
    "create_app",
    "discover",
    "find_source_files",
    "register",
    "registry",
    "resolve",
]
