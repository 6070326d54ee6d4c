"""
Container introspection: snapshots and diffs.

A snapshot is a read-only copy of every token → registrations of a registry at
one instant. Diffing two snapshots yields what activation added in between:

    before = snapshot_registry(container)
    import_provider_files()
    added = diff_snapshots(before, snapshot_registry(container))

Registrations are compared by *shape* (provider kind + class / value /
factory / alias target), never by identity of the Registration objects, so a
re-import that re-registers the same class is not reported twice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Protocol, Sequence, Tuple

from provider_kernel.di.providers import Registration, same_shape
from provider_kernel.di.tokens import Token

__all__ = [
    "SupportsEnumerateAll",
    "RegistrySnapshot",
    "snapshot_registry",
    "diff_snapshots",
]

logger = logging.getLogger("provider_kernel.di.introspection")


class SupportsEnumerateAll(Protocol):
    """Anything discovery can observe: a Container or an adapter around another registry."""

    def enumerate_all(self) -> Any: ...


@dataclass(frozen=True, eq=False)
class RegistrySnapshot:
    """
    Immutable view of a registry's registrations.

    Snapshots compare and hash by identity; use diff_snapshots() to compare
    contents.

    Attributes:
        by_token: Ordered read-only mapping of token to its registrations,
            in registration order.
    """

    by_token: Mapping[Token, Tuple[Registration, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __len__(self) -> int:
        return len(self.by_token)

    def __iter__(self) -> Iterator[Token]:
        return iter(self.by_token)

    def __contains__(self, token: Any) -> bool:
        try:
            return token in self.by_token
        except TypeError:
            return False

    def get(self, token: Token) -> Tuple[Registration, ...]:
        try:
            return self.by_token.get(token, ())
        except TypeError:
            return ()

    @property
    def registration_count(self) -> int:
        return sum(len(regs) for regs in self.by_token.values())


def _iter_entries(entries: Any) -> Iterator[Tuple[Token, Sequence[Registration]]]:
    if isinstance(entries, Mapping):
        yield from entries.items()
    else:
        yield from entries


def snapshot_registry(registry: SupportsEnumerateAll) -> RegistrySnapshot:
    """
    Capture every token and its ordered registrations. Read-only.

    A registry whose enumeration fails is logged and treated as empty.
    """
    try:
        by_token: Dict[Token, Tuple[Registration, ...]] = {}
        for token, registrations in _iter_entries(registry.enumerate_all()):
            by_token[token] = by_token.get(token, ()) + tuple(registrations)
    except Exception as e:
        logger.warning("⚠️ [kernel] Could not enumerate registry %r: %s", registry, e)
        return RegistrySnapshot()
    return RegistrySnapshot(MappingProxyType(by_token))


def diff_snapshots(
    before: RegistrySnapshot, after: RegistrySnapshot
) -> Dict[Token, List[Registration]]:
    """
    Registrations present in `after` whose shape does not occur in `before`.

    Tokens with nothing added are omitted. Structurally identical additions
    for one token are reported once.
    """
    added: Dict[Token, List[Registration]] = {}
    for token, registrations in after.by_token.items():
        known = before.get(token)
        new: List[Registration] = []
        for reg in registrations:
            if any(same_shape(reg.provider, old.provider) for old in known):
                continue
            if any(same_shape(reg.provider, seen.provider) for seen in new):
                continue
            new.append(reg)
        if new:
            added[token] = new
    return added
