# provider_kernel/di/context.py
"""
ContextVar-based current Container
──────────────────────────────────────────────
• Module-level register()/@registry write into the *current* container
• Falls back to the process-wide default container when nothing is bound
• ModuleActivator binds the discovery target while a file executes
• set_container()/reset_container() allow manual binding for tests
"""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token as ContextToken
from typing import TYPE_CHECKING, Iterator, Optional

if TYPE_CHECKING:
    from provider_kernel.di.registry import Container

_container_cv: ContextVar[Optional["Container"]] = ContextVar("_pk_container", default=None)


def set_container(container: "Container") -> ContextToken:
    """Bind a Container to the current context. Returns a reset token."""
    return _container_cv.set(container)


def get_container() -> "Container":
    """Return the bound Container, or the process-wide default."""
    bound = _container_cv.get()
    if bound is not None:
        return bound
    from provider_kernel.di.registry import container

    return container


def reset_container(token: ContextToken) -> None:
    """Restore the binding that was active before set_container()."""
    _container_cv.reset(token)


@contextmanager
def use_container(container: "Container") -> Iterator["Container"]:
    token = set_container(container)
    try:
        yield container
    finally:
        reset_container(token)
