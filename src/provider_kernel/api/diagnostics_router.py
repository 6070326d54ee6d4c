"""
──────────────────────────────────────────────────────────────
Default Kernel Router: Health, Registrations, Discovery, Info
──────────────────────────────────────────────────────────────
Purpose:
    Operational endpoints for kernel-based apps, exposing what the
    container holds and what the last discovery run added.

Exports:
    router → FastAPI APIRouter instance
──────────────────────────────────────────────────────────────
"""

import platform
import time
from typing import Any, Dict

from fastapi import APIRouter, Request

from provider_kernel import __version__
from provider_kernel.di.formatting import (
    describe_implementation,
    describe_registration,
    format_provider_kind,
    format_token,
)
from provider_kernel.di.errors import ProviderNotFoundError
from provider_kernel.di.introspection import snapshot_registry
from provider_kernel.di.providers import Registration

_router_start_time = time.time()

router = APIRouter(prefix="", tags=["system"])


def registration_view(reg: Registration) -> Dict[str, Any]:
    return {
        "token": format_token(reg.token),
        "kind": format_provider_kind(reg.provider_kind),
        "implementation": describe_implementation(reg.provider),
        "label": describe_registration(reg),
    }


@router.get("/healthz")
async def healthz():
    """Simple health check endpoint."""
    return {"ok": True, "uptime": round(time.time() - _router_start_time, 1)}


@router.get("/diz/registrations")
async def registrations(request: Request):
    """Every registration currently held by the app container."""
    snapshot = snapshot_registry(request.app.state.container)
    items = [registration_view(reg) for token in snapshot for reg in snapshot.get(token)]
    return {"tokens": len(snapshot), "count": len(items), "registrations": items}


@router.get("/diz/tokens/{name}")
async def named_token(name: str, request: Request):
    """Registrations held for one named (string) token."""
    regs = request.app.state.container.registrations(name)
    if not regs:
        raise ProviderNotFoundError(name, format_token(name))
    return {"token": format_token(name), "registrations": [registration_view(r) for r in regs]}


@router.get("/diz/discovery")
async def discovery(request: Request):
    """Files and registrations found by the startup discovery run."""
    result = getattr(request.app.state, "discovery", None)
    if result is None:
        return {"ran": False, "files": [], "added_count": 0, "added": []}
    return {
        "ran": True,
        "files": result.files,
        "added_count": result.added_count,
        "added": [registration_view(reg) for reg in result.registrations()],
    }


@router.get("/info")
async def info(request: Request):
    """Kernel + app build info."""
    return {
        "app": request.app.title,
        "kernel_version": __version__,
        "python": platform.python_version(),
    }
