# src/provider_kernel/web/api.py
from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import Iterable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from provider_kernel.api.diagnostics_router import router as kernel_diagnostics_router
from provider_kernel.autodiscover import Activator, discover_from_settings
from provider_kernel.config.base_settings import DiscoverySettings
from provider_kernel.di.context import get_container
from provider_kernel.di.registry import Container
from provider_kernel.log import configure_logging
from provider_kernel.web.errors import add_error_handlers


"""
──────────────────────────────────────────────────────────────
provider_kernel.web.api
──────────────────────────────────────────────────────────────
Purpose:
    FastAPI app factory for kernel-based services.

Responsibilities:
    • Run provider discovery at startup (lifespan) into the app container
    • Add CORS and global error handlers
    • Include the kernel diagnostics router (health, registrations, discovery)
──────────────────────────────────────────────────────────────
"""

logger = logging.getLogger("provider_kernel.web.api")


# ──────────────────────────────────────────────────────────────
# App Factory
# ──────────────────────────────────────────────────────────────
def create_app(
    *,
    title: Optional[str] = None,
    container: Optional[Container] = None,
    settings: Optional[DiscoverySettings] = None,
    run_discovery: bool = True,
    activator: Optional[Activator] = None,
    cors_allow_origins: Iterable[str] = ("*",),
) -> FastAPI:
    """
    Centralized FastAPI factory for provider_kernel apps.
    Discovery errors (NoFilesFoundError, ActivationError) abort startup.
    """
    settings = settings or DiscoverySettings()
    container = container or get_container()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if run_discovery:
            app.state.discovery = discover_from_settings(settings, container, activator)
        else:
            logger.info("⚠️ [kernel] Discovery disabled, using pre-registered providers only")
        yield

    app = FastAPI(title=title or settings.app_name, lifespan=lifespan)
    app.state.container = container
    app.state.discovery = None

    # ──────────────────────────────────────────────────────────
    # 🔹 CORS Setup
    # ──────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_allow_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ──────────────────────────────────────────────────────────
    # 🔹 Global Error Handlers
    # ──────────────────────────────────────────────────────────
    add_error_handlers(app)

    # ──────────────────────────────────────────────────────────
    # 🔹 Kernel Diagnostics Router
    # ──────────────────────────────────────────────────────────
    app.include_router(kernel_diagnostics_router)

    logger.info("🚀 [kernel] App '%s' ready (container=%r)", app.title, container)
    return app
