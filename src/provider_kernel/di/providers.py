"""
Provider descriptors and registrations.

A provider describes how the value behind a token is produced:

    ClassProvider(use_class)     → instantiate the class
    ValueProvider(use_value)     → value is already computed
    FactoryProvider(use_factory) → call with no arguments
    AliasProvider(use_token)     → redirect to another token

Descriptors compare *structurally* through ``same_shape`` rather than by
dataclass equality, so a value that has no sane ``==`` never breaks a diff.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Union

from provider_kernel.di.tokens import Token, is_named

__all__ = [
    "ProviderKind",
    "ClassProvider",
    "ValueProvider",
    "FactoryProvider",
    "AliasProvider",
    "Provider",
    "Registration",
    "PROVIDER_KEYS",
    "provider_kind_of",
    "coerce_provider",
    "make_provider",
    "same_shape",
]


class ProviderKind(str, Enum):
    CLASS = "class"
    VALUE = "value"
    FACTORY = "factory"
    TOKEN = "token"


@dataclass(frozen=True, eq=False)
class ClassProvider:
    use_class: type

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.CLASS


@dataclass(frozen=True, eq=False)
class ValueProvider:
    use_value: Any

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.VALUE


@dataclass(frozen=True, eq=False)
class FactoryProvider:
    use_factory: Callable[[], Any]

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.FACTORY


@dataclass(frozen=True, eq=False)
class AliasProvider:
    use_token: Token

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.TOKEN


Provider = Union[ClassProvider, ValueProvider, FactoryProvider, AliasProvider]

# Mapping form accepted by register_many()/@registry, checked in this order.
PROVIDER_KEYS: dict[str, type] = {
    "use_class": ClassProvider,
    "use_value": ValueProvider,
    "use_factory": FactoryProvider,
    "use_token": AliasProvider,
}

_DESCRIPTOR_TYPES = tuple(PROVIDER_KEYS.values())


@dataclass(frozen=True, eq=False)
class Registration:
    """One (token, provider) pair as held by a container."""

    token: Token
    provider: Provider

    @property
    def provider_kind(self) -> Optional[ProviderKind]:
        return provider_kind_of(self.provider)

    def __repr__(self) -> str:
        return f"Registration(token={self.token!r}, provider={self.provider!r})"


def provider_kind_of(provider: Any) -> Optional[ProviderKind]:
    if isinstance(provider, _DESCRIPTOR_TYPES):
        return provider.kind
    return None


def coerce_provider(obj: Any) -> Optional[Provider]:
    """Return a descriptor for ``obj`` or None when it has no recognisable shape."""
    if isinstance(obj, _DESCRIPTOR_TYPES):
        return obj
    if isinstance(obj, Mapping):
        for key, descriptor_cls in PROVIDER_KEYS.items():
            if key in obj:
                return descriptor_cls(obj[key])
    return None


def make_provider(**use: Any) -> Provider:
    """Build a descriptor from exactly one ``use_*`` keyword."""
    given = [key for key in PROVIDER_KEYS if key in use]
    unknown = set(use) - set(PROVIDER_KEYS)
    if unknown:
        raise TypeError(f"Unknown provider keys: {sorted(unknown)}")
    if len(given) != 1:
        raise ValueError(
            f"Exactly one of {list(PROVIDER_KEYS)} is required, got {given or 'none'}"
        )
    key = given[0]
    return PROVIDER_KEYS[key](use[key])


# ──────────────────────────────────────────────────────────────
# Structural comparison
# ──────────────────────────────────────────────────────────────
def _values_equal(a: Any, b: Any) -> bool:
    if a is b:
        return True
    # 1, 1.0 and True are distinct values
    if type(a) is not type(b):
        return False
    if isinstance(a, dict):
        return a.keys() == b.keys() and all(_values_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)):
        return len(a) == len(b) and all(_values_equal(x, y) for x, y in zip(a, b))
    try:
        result = a == b
    except Exception:
        return False
    # numpy arrays, query builders, etc. return non-bool objects from ==
    if isinstance(result, bool):
        return result
    return False


def _tokens_equal(a: Any, b: Any) -> bool:
    # str by value; Marker and type objects fall back to identity
    return a is b or (is_named(a) and is_named(b) and a == b)


def same_shape(a: Any, b: Any) -> bool:
    """True when two descriptors have the same kind and the same payload."""
    if type(a) is not type(b) or not isinstance(a, _DESCRIPTOR_TYPES):
        return False
    if isinstance(a, ClassProvider):
        return a.use_class is b.use_class
    if isinstance(a, FactoryProvider):
        return a.use_factory is b.use_factory
    if isinstance(a, AliasProvider):
        return _tokens_equal(a.use_token, b.use_token)
    try:
        return _values_equal(a.use_value, b.use_value)
    except RecursionError:  # self-referencing containers
        return False
