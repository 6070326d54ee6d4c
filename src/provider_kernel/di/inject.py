from __future__ import annotations
import types
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated, Any, Optional, Union, get_args, get_origin, get_type_hints

if TYPE_CHECKING:
    from provider_kernel.di.registry import Container

"""
──────────────────────────────────────────────────────────────────────────────
Automatic Dependency Injection (Autowiring)
──────────────────────────────────────────────────────────────────────────────
Purpose:
    Inject dependencies into a class instance based on its type annotations.

Mechanics:
    - Reads class-level annotations (with Annotated extras)
    - Annotated[T, Inject(token)] → resolve `token`
    - plain T / Optional[T] → resolve the class T itself
    - Skips attributes that are already set, private, or not registered

Used by:
    Container.resolve() → autowire(instance, container) after each useClass instantiation

Example:
    class CreateUser:
        users: Annotated[UserRepository, Inject(USER_REPOSITORY)]
        clock: Clock

    container.register(CREATE_USER, use_class=CreateUser)
    create_user = container.resolve(CREATE_USER)
"""


@dataclass(frozen=True)
class Inject:
    """Annotated metadata naming the token to inject."""

    token: Any


def _unwrap_optional(typ: Any) -> Any:
    if get_origin(typ) in (Union, types.UnionType):
        args = [a for a in get_args(typ) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return typ


def _token_for(typ: Any) -> Any:
    if get_origin(typ) is Annotated:
        base, *extras = get_args(typ)
        for extra in extras:
            if isinstance(extra, Inject):
                return extra.token
        typ = base
    return _unwrap_optional(typ)


def autowire(obj: Any, container: "Container") -> None:
    """
    Injects attributes on 'obj' based on its type annotations.
    For each annotated attr that's None/missing and registered, resolve and set it.
    """
    try:
        hints = get_type_hints(obj.__class__, include_extras=True)
    except Exception:
        # Unresolvable forward refs: nothing we can wire
        return
    for name, typ in hints.items():
        if name.startswith("_"):
            continue
        if getattr(obj, name, None) is not None:
            continue
        token: Optional[Any] = _token_for(typ)
        if not container.is_registered(token):
            continue  # allows plain data fields
        setattr(obj, name, container.resolve(token))
