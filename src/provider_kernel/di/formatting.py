# provider_kernel/di/formatting.py
"""
Registration formatting for diagnostics
──────────────────────────────────────────────
Turns tokens and providers into stable, human-readable labels:

    format_token("repo")               → token "repo"
    format_token(Marker("Logger"))     → Marker(Logger)
    format_token(SqlUserRepository)    → class SqlUserRepository
    format_provider_kind("factory")    → useFactory
    describe_implementation(provider)  → SqlUserRepository | int | null | factory(make_repo) | token(...)

Every public function here is total: it returns a fallback label instead of
raising, so it is safe to call from logging and error paths.
──────────────────────────────────────────────
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from provider_kernel.di.providers import (
    AliasProvider,
    ClassProvider,
    FactoryProvider,
    ProviderKind,
    Registration,
    ValueProvider,
    coerce_provider,
)
from provider_kernel.di.tokens import is_marker, is_named, is_type_ref

logger = logging.getLogger("provider_kernel.di.formatting")

ANONYMOUS = "anonymous"
UNKNOWN_KIND = "unknown"

_KIND_LABELS = {
    ProviderKind.CLASS: "useClass",
    ProviderKind.VALUE: "useValue",
    ProviderKind.FACTORY: "useFactory",
    ProviderKind.TOKEN: "useToken",
}


# ──────────────────────────────────────────────
# Reflection helpers
# ──────────────────────────────────────────────
def _declared_name(cls: Any) -> Optional[str]:
    try:
        name = getattr(cls, "__name__", None)
    except Exception:
        return None
    if isinstance(name, str) and name:
        return name
    return None


def _function_name(fn: Callable) -> Optional[str]:
    try:
        name = getattr(fn, "__name__", None)
    except Exception:
        return None
    if not isinstance(name, str) or not name or name == "<lambda>":
        return None
    return name


def _type_name(value: Any) -> str:
    return _declared_name(type(value)) or ANONYMOUS


def _safe_str(obj: Any) -> str:
    try:
        return str(obj)
    except Exception:
        return object.__repr__(obj)


# ──────────────────────────────────────────────
# Public API
# ──────────────────────────────────────────────
def format_token(token: Any) -> str:
    try:
        if is_named(token):
            return f'token "{token}"'
        if is_marker(token):
            return f"Marker({token.label or ANONYMOUS})"
        if is_type_ref(token):
            return f"class {_declared_name(token) or ANONYMOUS}"
        return _safe_str(token)
    except Exception:
        return object.__repr__(token)


def format_provider_kind(kind: Any) -> str:
    try:
        return _KIND_LABELS[ProviderKind(kind)]
    except Exception:
        return UNKNOWN_KIND


def introspect_factory_return_type_name(factory: Callable[[], Any]) -> str:
    """
    Best-effort name of what `factory` produces.

    NOTE: this *calls* the factory. Factories may have side effects or need
    dependencies that only exist during real resolution; we accept that for
    diagnostics and swallow any Exception it raises. SystemExit and
    KeyboardInterrupt are not caught and propagate to the caller.
    """
    fallback = f"factory({_function_name(factory) or ANONYMOUS})"
    try:
        result = factory()
    except Exception as e:
        logger.debug("factory trial for %s raised %s: %s", fallback, type(e).__name__, e)
        return fallback
    if result is None:
        return fallback
    return _type_name(result)


def describe_implementation(provider: Any) -> Optional[str]:
    """Label for what a provider produces, or None for an unrecognisable provider."""
    try:
        descriptor = coerce_provider(provider)
    except Exception:
        return None

    if isinstance(descriptor, ClassProvider):
        return _declared_name(descriptor.use_class) or ANONYMOUS
    if isinstance(descriptor, ValueProvider):
        if descriptor.use_value is None:
            return "null"
        return _type_name(descriptor.use_value)
    if isinstance(descriptor, FactoryProvider):
        return introspect_factory_return_type_name(descriptor.use_factory)
    if isinstance(descriptor, AliasProvider):
        return f"token({format_token(descriptor.use_token)})"
    return None


def describe_registration(registration: Registration) -> str:
    """One-line label: `<token> -> <useKind>(<implementation>)`."""
    try:
        token = format_token(registration.token)
        kind = format_provider_kind(registration.provider_kind)
        impl = describe_implementation(registration.provider)
    except Exception:
        return object.__repr__(registration)
    return f"{token} -> {kind}({impl if impl is not None else '?'})"
