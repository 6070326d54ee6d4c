"""
Built-in kernel routers.
──────────────────────────────────────────────────────────────
Currently includes:
 - /healthz
 - /diz/registrations
 - /diz/tokens/{name}
 - /diz/discovery
 - /info
──────────────────────────────────────────────────────────────
"""
from .diagnostics_router import router as diagnostics_router

__all__ = ["diagnostics_router"]
