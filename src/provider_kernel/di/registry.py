from __future__ import annotations
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from provider_kernel.di.context import get_container
from provider_kernel.di.errors import DIError, ProviderNotFoundError, ResolutionError
from provider_kernel.di.inject import autowire
from provider_kernel.di.providers import (
    AliasProvider,
    ClassProvider,
    FactoryProvider,
    PROVIDER_KEYS,
    Provider,
    Registration,
    ValueProvider,
    coerce_provider,
    make_provider,
)
from provider_kernel.di.tokens import Token

"""
──────────────────────────────────────────────────────────────────────────────
Dependency Injection Container
──────────────────────────────────────────────────────────────────────────────
Purpose:
    Hold token → [registrations] and turn a token into a value.

APIs:
    - Container.register(token, use_class=... | use_value=... | use_factory=... | use_token=...)
    - Container.resolve(token) → instance (last registration wins)
    - Container.enumerate_all() → {token: [Registration, ...]}

Module-level helpers write into the *current* container (see di.context):
    - register(token, **use)
    - resolve(token)
    - @registry([...]) → class decorator, one entry per registration

Usage:
    @registry([
        {"token": USER_REPOSITORY, "use_class": SqlUserRepository},
        {"token": "greeting", "use_value": "hello"},
    ])
    class UserRegistry: ...

    repo = resolve(USER_REPOSITORY)
"""


class Container:
    """Token-keyed registry of providers. Multiple registrations per token are kept in order."""

    def __init__(self, name: str = "default"):
        self.name = name
        self._registrations: Dict[Token, List[Registration]] = {}

    def __repr__(self) -> str:
        return f"Container({self.name!r}, tokens={len(self._registrations)})"

    def __len__(self) -> int:
        return len(self._registrations)

    def __contains__(self, token: Token) -> bool:
        return self.is_registered(token)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def register(self, token: Token, provider: Optional[Provider] = None, **use: Any) -> Registration:
        if provider is not None and use:
            raise DIError("Pass either a provider descriptor or one use_* keyword, not both")
        if provider is None:
            try:
                provider = make_provider(**use)
            except (TypeError, ValueError) as e:
                raise DIError(f"Invalid registration for {token!r}: {e}") from e
        else:
            coerced = coerce_provider(provider)
            if coerced is None:
                raise DIError(f"Unrecognised provider for {token!r}: {provider!r}")
            provider = coerced

        registration = Registration(token, provider)
        self._registrations.setdefault(token, []).append(registration)
        return registration

    def register_many(self, entries: Iterable[Mapping[str, Any]]) -> List[Registration]:
        """Register mapping entries of the form {"token": ..., "use_*": ...}."""
        out: List[Registration] = []
        for entry in entries:
            if "token" not in entry:
                raise DIError(f"Registration entry is missing 'token': {dict(entry)!r}")
            use = {k: v for k, v in entry.items() if k in PROVIDER_KEYS}
            out.append(self.register(entry["token"], **use))
        return out

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def is_registered(self, token: Token) -> bool:
        try:
            return bool(self._registrations.get(token))
        except TypeError:  # unhashable token
            return False

    def registrations(self, token: Token) -> List[Registration]:
        return list(self._registrations.get(token, ()))

    def enumerate_all(self) -> Dict[Token, List[Registration]]:
        """Copy of every token and its ordered registrations."""
        return {token: list(regs) for token, regs in self._registrations.items()}

    def reset(self) -> None:
        self._registrations.clear()

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    def resolve(self, token: Token) -> Any:
        seen: List[Token] = []
        while True:
            regs = self._registrations.get(token)
            if not regs:
                raise ProviderNotFoundError(token)
            provider = regs[-1].provider

            if isinstance(provider, AliasProvider):
                seen.append(token)
                token = provider.use_token
                if any(token is t or token == t for t in seen):
                    chain = " -> ".join(repr(t) for t in [*seen, token])
                    raise ResolutionError(f"Alias loop detected: {chain}")
                continue

            if isinstance(provider, ValueProvider):
                return provider.use_value
            if isinstance(provider, FactoryProvider):
                return provider.use_factory()
            if isinstance(provider, ClassProvider):
                instance = provider.use_class()
                autowire(instance, self)
                return instance
            raise ResolutionError(f"Unsupported provider {provider!r} for {token!r}")


# Process-wide default container
container = Container()


def register(token: Token, provider: Optional[Provider] = None, **use: Any) -> Registration:
    return get_container().register(token, provider, **use)


def resolve(token: Token) -> Any:
    return get_container().resolve(token)


def registry(entries: Iterable[Mapping[str, Any]]) -> Callable[[type], type]:
    """Class decorator: register every entry into the current container at definition time."""
    entries = list(entries)

    def decorator(cls: type) -> type:
        get_container().register_many(entries)
        return cls

    return decorator
