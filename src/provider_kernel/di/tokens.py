from __future__ import annotations
from typing import Any, Optional, Union

"""
──────────────────────────────────────────────────────────────────────────────
DI Tokens
──────────────────────────────────────────────────────────────────────────────
A token is the identity a provider is registered under. Three shapes:

    - str     → named token, equal by value
    - Marker  → opaque handle, equal only to itself
    - type    → class reference, equal by identity

Usage:
    USER_REPOSITORY = Marker("UserRepository")
    container.register(USER_REPOSITORY, use_class=SqlUserRepository)
"""


class Marker:
    """Process-unique opaque token. Two markers are never equal unless identical."""

    __slots__ = ("label",)

    def __init__(self, label: Optional[str] = None):
        self.label = label

    def __repr__(self) -> str:
        return f"Marker({self.label or 'anonymous'})"


Token = Union[str, Marker, type]


def is_named(token: Any) -> bool:
    return isinstance(token, str)


def is_marker(token: Any) -> bool:
    return isinstance(token, Marker)


def is_type_ref(token: Any) -> bool:
    return isinstance(token, type)
