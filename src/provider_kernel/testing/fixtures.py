"""
──────────────────────────────────────────────────────────────────────────────
provider_kernel.testing.fixtures
──────────────────────────────────────────────────────────────────────────────
Purpose:
    Provide reusable pytest fixtures for kernel-based applications.

Exports:
    - isolated_container   → fresh Container bound as the current container per test
    - recording_activator  → activator that records paths and runs a callback per file

Usage in your test:
    from provider_kernel.testing.fixtures import isolated_container

    def test_user_registry(isolated_container):
        result = auto_register(["app/modules/user"], registry=isolated_container)
        assert result.added
──────────────────────────────────────────────────────────────────────────────
"""
from __future__ import annotations

from typing import Callable, List, Optional

import pytest

from provider_kernel.di.context import reset_container, set_container
from provider_kernel.di.registry import Container


class RecordingActivator:
    """Activator double: remembers activated paths, delegates to `on_activate`."""

    def __init__(self, on_activate: Optional[Callable[[str], None]] = None):
        self.on_activate = on_activate
        self.paths: List[str] = []

    def __call__(self, path: str) -> None:
        self.paths.append(path)
        if self.on_activate is not None:
            self.on_activate(path)


# ──────────────────────────────────────────────────────────────
# Container Fixture (per test)
# ──────────────────────────────────────────────────────────────
@pytest.fixture()
def isolated_container(request):
    """
    Provide a clean Container for each test, bound as the current container
    so module-level register()/@registry calls land in it.
    """
    container = Container(name=f"test:{request.node.name}")
    token = set_container(container)
    yield container
    reset_container(token)
    container.reset()


@pytest.fixture()
def recording_activator():
    """Factory fixture: recording_activator(on_activate=None) → RecordingActivator."""
    return RecordingActivator
